"""Business logic services."""

from .billing_service import BillingService
from .calculator_service import CalculatorService
from .catalog_store import CatalogStore
from .extraction_service import NaturalLanguageExtractor
from .lead_service import LeadService
from .notification_service import NotificationService
from .quote_session import QuoteSession, QuoteSessionService, QuoteState, QuoteSubmission

__all__ = [
    "BillingService",
    "CalculatorService",
    "CatalogStore",
    "LeadService",
    "NaturalLanguageExtractor",
    "NotificationService",
    "QuoteSession",
    "QuoteSessionService",
    "QuoteState",
    "QuoteSubmission",
]

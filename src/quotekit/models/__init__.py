"""Domain models package for QuoteKit.

All models are immutable Pydantic models with strict validation.
"""

from .account import MONTHLY_QUOTE_LIMITS, Account, AccountCreate, SubscriptionTier
from .base import BaseModelConfig, IdentifiableModel, TimestampedModel
from .calculator import (
    CalculatorInstance,
    CalculatorInstanceCreate,
    CalculatorInstanceUpdate,
    CalculatorTemplate,
    CatalogOverrides,
    ThemeConfig,
)
from .catalog import (
    Currency,
    EffectKind,
    FieldId,
    Option,
    OptionCatalog,
    OptionEffect,
    OptionGroup,
    OptionId,
)
from .lead import ContactInfo, Lead, LeadCreate, LeadStatus
from .quote import LineItem, LineItemKind, QuoteBreakdown
from .selection import FieldValue, Selection

__all__ = [
    # Base models
    "BaseModelConfig",
    "TimestampedModel",
    "IdentifiableModel",
    # Catalog models
    "Currency",
    "EffectKind",
    "FieldId",
    "Option",
    "OptionCatalog",
    "OptionEffect",
    "OptionGroup",
    "OptionId",
    # Selection and quote models
    "FieldValue",
    "Selection",
    "LineItem",
    "LineItemKind",
    "QuoteBreakdown",
    # Lead models
    "ContactInfo",
    "Lead",
    "LeadCreate",
    "LeadStatus",
    # Calculator models
    "CalculatorTemplate",
    "CalculatorInstance",
    "CalculatorInstanceCreate",
    "CalculatorInstanceUpdate",
    "CatalogOverrides",
    "ThemeConfig",
    # Account models
    "Account",
    "AccountCreate",
    "SubscriptionTier",
    "MONTHLY_QUOTE_LIMITS",
]

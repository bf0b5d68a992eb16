# QuoteKit - Embeddable Quote Calculator Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies providing settings and services.

Services are built once per application and stored on ``app.state``; the
dependencies below hand them to endpoints.
"""

from attrs import frozen
from beartype import beartype
from fastapi import Request

from ..core.cache import get_cache
from ..core.config import Settings
from ..services.billing_service import BillingService
from ..services.calculator_service import CalculatorService
from ..services.catalog_store import CatalogStore
from ..services.extraction_service import NaturalLanguageExtractor
from ..services.lead_service import LeadService
from ..services.notification_service import NotificationService
from ..services.quote_session import QuoteSessionService


@frozen
class Services:
    """The service graph shared by all requests."""

    settings: Settings
    catalog_store: CatalogStore
    calculator_service: CalculatorService
    lead_service: LeadService
    billing_service: BillingService
    notification_service: NotificationService
    extractor: NaturalLanguageExtractor
    session_service: QuoteSessionService


@beartype
def build_services(
    settings: Settings,
    catalog_store: CatalogStore | None = None,
    notification_service: NotificationService | None = None,
    extractor: NaturalLanguageExtractor | None = None,
) -> Services:
    """Wire the services for one application instance."""
    catalog_store = catalog_store or CatalogStore.from_directory(settings.catalog_dir)
    notification_service = notification_service or NotificationService(settings)
    extractor = extractor or NaturalLanguageExtractor(settings)
    calculator_service = CalculatorService(catalog_store)
    lead_service = LeadService()
    billing_service = BillingService()

    session_service = QuoteSessionService(
        cache=get_cache(),
        catalog_store=catalog_store,
        calculator_service=calculator_service,
        lead_service=lead_service,
        billing_service=billing_service,
        notifier=notification_service,
        extractor=extractor,
        settings=settings,
    )
    return Services(
        settings=settings,
        catalog_store=catalog_store,
        calculator_service=calculator_service,
        lead_service=lead_service,
        billing_service=billing_service,
        notification_service=notification_service,
        extractor=extractor,
        session_service=session_service,
    )


def get_services(request: Request) -> Services:
    """Provide the application's services."""
    services: Services = request.app.state.services
    return services


def get_app_settings(request: Request) -> Settings:
    """Provide the settings the application was built with."""
    return get_services(request).settings


def get_catalog_store(request: Request) -> CatalogStore:
    """Provide the catalog store."""
    return get_services(request).catalog_store


def get_calculator_service(request: Request) -> CalculatorService:
    """Provide the calculator service."""
    return get_services(request).calculator_service


def get_lead_service(request: Request) -> LeadService:
    """Provide the lead service."""
    return get_services(request).lead_service


def get_billing_service(request: Request) -> BillingService:
    """Provide the billing service."""
    return get_services(request).billing_service


def get_session_service(request: Request) -> QuoteSessionService:
    """Provide the quote session service."""
    return get_services(request).session_service

"""Test configuration and shared fixtures for QuoteKit."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from quotekit.core.cache import Cache
from quotekit.core.config import Settings
from quotekit.models.catalog import (
    Currency,
    Option,
    OptionCatalog,
    OptionEffect,
    OptionGroup,
)
from quotekit.models.lead import ContactInfo
from quotekit.services.billing_service import BillingService
from quotekit.services.calculator_service import CalculatorService
from quotekit.services.catalog_store import CatalogStore
from quotekit.services.lead_service import LeadService
from quotekit.services.quote_session import QuoteSessionService


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment, with email and AI disabled."""
    return Settings(
        api_env="development",
        public_base_url="https://app.quotekit.test",
        openai_api_key=None,
        smtp_host=None,
    )


@pytest.fixture(scope="session")
def catalog_store() -> CatalogStore:
    """Store loaded from the packaged vertical catalogs."""
    return CatalogStore.from_directory(Settings().catalog_dir)


@pytest.fixture
def portrait_catalog(catalog_store: CatalogStore) -> OptionCatalog:
    """Portrait photography catalog (fixed base rate 150)."""
    return catalog_store.get_catalog("portrait-photography").unwrap()


@pytest.fixture
def translation_catalog(catalog_store: CatalogStore) -> OptionCatalog:
    """Translation catalog (base derived from factors)."""
    return catalog_store.get_catalog("translation-services").unwrap()


@pytest.fixture
def car_wash_catalog(catalog_store: CatalogStore) -> OptionCatalog:
    """Mobile car wash catalog (percentage surcharges)."""
    return catalog_store.get_catalog("mobile-car-wash").unwrap()


@pytest.fixture
def simple_catalog() -> OptionCatalog:
    """Small catalog exercising every effect kind."""
    return OptionCatalog(
        vertical="window-cleaning",
        name="Window Cleaning",
        base_rate=Decimal("100"),
        currency=Currency(code="USD", symbol="$"),
        groups={
            "size": OptionGroup(
                label="Home size",
                options=[
                    Option(id="small", label="Small", effect=OptionEffect.flat(0)),
                    Option(id="large", label="Large", effect=OptionEffect.flat(50)),
                ],
            ),
            "floors": OptionGroup(
                label="Floors",
                options=[
                    Option(
                        id="one",
                        label="One floor",
                        effect=OptionEffect.multiplier_on_base(1),
                    ),
                    Option(
                        id="three",
                        label="Three floors",
                        effect=OptionEffect.multiplier_on_base("1.5"),
                    ),
                ],
            ),
            "timing": OptionGroup(
                label="Timing",
                required=False,
                options=[
                    Option(
                        id="weekend",
                        label="Weekend",
                        effect=OptionEffect.percentage_of_running_total("0.10"),
                    ),
                    Option(
                        id="off-peak",
                        label="Off-peak",
                        effect=OptionEffect.percentage_of_running_total("-0.05"),
                    ),
                ],
            ),
            "extras": OptionGroup(
                label="Extras",
                required=False,
                multi_select=True,
                options=[
                    Option(id="screens", label="Screens", effect=OptionEffect.flat(20)),
                    Option(id="gutters", label="Gutters", effect=OptionEffect.flat(35)),
                    Option(id="free-check", label="Check", effect=OptionEffect.flat(0)),
                ],
            ),
        },
        promo_codes={"Spring20": Decimal("0.20"), "everything": Decimal("1.5")},
    )


@pytest.fixture
def contact() -> ContactInfo:
    """Contact details of a lead."""
    return ContactInfo(name="Ada Lovelace", email="ada@example.com", phone="+44 20 7946 0018")


@pytest.fixture
def cache() -> Cache:
    """Fresh in-memory cache."""
    return Cache()


@pytest.fixture
def lead_service() -> LeadService:
    """Fresh lead store."""
    return LeadService()


@pytest.fixture
def billing_service() -> BillingService:
    """Fresh account store."""
    return BillingService()


@pytest.fixture
def calculator_service(catalog_store: CatalogStore) -> CalculatorService:
    """Calculator service over the packaged catalogs."""
    return CalculatorService(catalog_store)


@pytest.fixture
def mock_notifier() -> MagicMock:
    """Notification service that records sends."""
    notifier = MagicMock()
    notifier.send_quote = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def mock_extractor() -> MagicMock:
    """Extractor returning no values unless configured."""
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value={})
    return extractor


@pytest.fixture
def session_service(
    cache: Cache,
    catalog_store: CatalogStore,
    calculator_service: CalculatorService,
    lead_service: LeadService,
    billing_service: BillingService,
    mock_notifier: MagicMock,
    mock_extractor: MagicMock,
    settings: Settings,
) -> QuoteSessionService:
    """Session service with mocked notification and extraction."""
    return QuoteSessionService(
        cache=cache,
        catalog_store=catalog_store,
        calculator_service=calculator_service,
        lead_service=lead_service,
        billing_service=billing_service,
        notifier=mock_notifier,
        extractor=mock_extractor,
        settings=settings,
    )

"""Quote session state management.

A session tracks one visitor filling in a calculator. Every mutation
recomputes a live preview; submission freezes the quote into a lead.

States::

    incomplete <-> complete -> locked

``locked`` is terminal. Submitting a locked session returns the lead it
already produced and never sends a second notification.
"""

import asyncio
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.cache import Cache
from ..core.config import Settings
from ..core.exceptions import (
    CatalogMismatchError,
    NotificationDeliveryError,
    QuotaExceededError,
)
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.account import Account
from ..models.catalog import OptionCatalog
from ..models.lead import ContactInfo, Lead, LeadCreate
from ..models.quote import QuoteBreakdown
from ..models.selection import FieldValue, Selection
from .billing_service import BillingService
from .calculator_service import CalculatorService
from .catalog_store import CatalogStore
from .extraction_service import NaturalLanguageExtractor
from .lead_service import LeadService
from .notification_service import NotificationService
from .pricing import FieldError, check_selection, compute_quote, find_missing_fields

logger = get_logger(__name__)


class QuoteState(str, Enum):
    """Lifecycle of a quote session."""

    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    LOCKED = "locked"


class QuoteSession(BaseModel):
    """Current state of one calculator session."""

    model_config = ConfigDict(
        frozen=False,  # Must be mutable for state updates
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )
    session_id: UUID
    vertical: str
    calculator_instance_id: UUID | None = None
    selection: Selection = Field(default_factory=Selection)
    state: QuoteState = QuoteState.INCOMPLETE
    validation_errors: list[FieldError] = Field(default_factory=list)
    breakdown: QuoteBreakdown | None = None
    lead_id: UUID | None = None
    notification_sent: bool = False
    notification_error: str | None = None
    started_at: datetime
    last_updated: datetime
    expires_at: datetime


class QuoteSubmission(BaseModel):
    """Outcome of submitting a session."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )
    session: QuoteSession
    lead: Lead
    already_submitted: bool = False


class QuoteSessionService:
    """Manage quote sessions from first field to submitted lead."""

    def __init__(
        self,
        cache: Cache,
        catalog_store: CatalogStore,
        calculator_service: CalculatorService,
        lead_service: LeadService,
        billing_service: BillingService,
        notifier: NotificationService,
        extractor: NaturalLanguageExtractor,
        settings: Settings,
    ) -> None:
        """Initialize session service."""
        self._cache = cache
        self._catalog_store = catalog_store
        self._calculator_service = calculator_service
        self._lead_service = lead_service
        self._billing_service = billing_service
        self._notifier = notifier
        self._extractor = extractor
        self._cache_prefix = "quote_session:"
        self._session_ttl = settings.session_ttl_seconds
        self._submit_locks: dict[UUID, asyncio.Lock] = {}
        # Callers holding or waiting on each submit lock
        self._submit_lock_users: dict[UUID, int] = {}

    @beartype
    async def start_session(
        self,
        vertical: str | None = None,
        calculator_instance_id: UUID | None = None,
    ) -> Result[QuoteSession, str]:
        """Start a session for a vertical or a calculator instance."""
        if calculator_instance_id is not None:
            instance = (
                await self._calculator_service.get_instance(calculator_instance_id)
            ).unwrap()
            if instance is None or not instance.is_active:
                return Err("Calculator not found")
            if vertical is not None and vertical != instance.vertical:
                return Err("Vertical does not match the calculator")
            vertical = instance.vertical
        if vertical is None:
            return Err("A vertical or calculator is required")

        session_id = uuid4()
        now = datetime.now(timezone.utc)
        session = QuoteSession(
            session_id=session_id,
            vertical=vertical,
            calculator_instance_id=calculator_instance_id,
            started_at=now,
            last_updated=now,
            expires_at=now + timedelta(seconds=self._session_ttl),
        )

        catalog_result = await self._catalog_for(session)
        if isinstance(catalog_result, Err):
            return catalog_result

        session = self._refresh(session, catalog_result.unwrap(), session.selection)
        await self._save_session(session)
        logger.debug("Quote session %s started for %s", session_id, vertical)
        return Ok(session)

    @beartype
    async def get_session(self, session_id: UUID) -> Result[QuoteSession | None, str]:
        """Get session by ID."""
        cache_key = f"{self._cache_prefix}{session_id}"
        cached = await self._cache.get(cache_key)

        if not cached:
            return Ok(None)

        try:
            session = QuoteSession.model_validate_json(cached)
        except ValidationError as e:
            return Err(f"Failed to deserialize session: {e}")

        # Check expiration
        if datetime.now(timezone.utc) > session.expires_at:
            await self._cache.delete(cache_key)
            return Ok(None)

        return Ok(session)

    @beartype
    async def update_fields(
        self,
        session_id: UUID,
        field_values: Mapping[str, FieldValue],
        promo_code: str | None = None,
        clear: Sequence[str] = (),
    ) -> Result[QuoteSession, str]:
        """Apply field changes and recompute the preview.

        An empty value or a field listed in ``clear`` unsets the field. A
        ``promo_code`` of ``""`` removes the code, ``None`` leaves it alone.

        Raises:
            CatalogMismatchError: a value is not in the catalog. The stored
                selection is discarded before the error propagates.
        """
        session_result = await self._load_open_session(session_id)
        if isinstance(session_result, Err):
            return session_result
        session = session_result.unwrap()

        catalog_result = await self._catalog_for(session)
        if isinstance(catalog_result, Err):
            return catalog_result
        catalog = catalog_result.unwrap()

        selection = session.selection
        for field_id, value in field_values.items():
            if value:
                selection = selection.with_value(field_id, value)
            else:
                selection = selection.without_value(field_id)
        for field_id in clear:
            selection = selection.without_value(field_id)
        if promo_code is not None:
            selection = selection.with_promo_code(promo_code)

        try:
            check_selection(catalog, selection)
        except CatalogMismatchError:
            logger.warning(
                "Session %s selection no longer matches the %s catalog; resetting",
                session_id,
                catalog.vertical,
            )
            reset = self._refresh(
                session.model_copy(update={"breakdown": None}), catalog, Selection()
            )
            await self._save_session(reset)
            raise

        session = self._refresh(session, catalog, selection)
        await self._save_session(session)
        return Ok(session)

    @beartype
    async def prefill(self, session_id: UUID, free_text: str) -> Result[QuoteSession, str]:
        """Fill fields from a free-text description of the job.

        Raises:
            ExtractionError: the description could not be turned into
                values from the catalog.
        """
        session_result = await self._load_open_session(session_id)
        if isinstance(session_result, Err):
            return session_result
        session = session_result.unwrap()

        catalog_result = await self._catalog_for(session)
        if isinstance(catalog_result, Err):
            return catalog_result

        field_values = await self._extractor.extract(catalog_result.unwrap(), free_text)
        return await self.update_fields(session_id, field_values)

    @beartype
    async def submit(
        self, session_id: UUID, contact: ContactInfo
    ) -> Result[QuoteSubmission, str]:
        """Lock the quote, store the lead and notify.

        Repeated or concurrent submits of one session produce one lead and
        at most one notification.

        Raises:
            QuotaExceededError: the calculator owner's plan is used up.
        """
        lock = self._submit_locks.setdefault(session_id, asyncio.Lock())
        self._submit_lock_users[session_id] = (
            self._submit_lock_users.get(session_id, 0) + 1
        )
        try:
            async with lock:
                return await self._submit_locked(session_id, contact)
        finally:
            self._submit_lock_users[session_id] -= 1
            if not self._submit_lock_users[session_id]:
                del self._submit_lock_users[session_id]
                del self._submit_locks[session_id]

    async def _submit_locked(
        self, session_id: UUID, contact: ContactInfo
    ) -> Result[QuoteSubmission, str]:
        session_result = await self.get_session(session_id)
        if isinstance(session_result, Err):
            return session_result
        session = session_result.unwrap()
        if session is None:
            return Err("Session not found or expired")

        if session.state == QuoteState.LOCKED:
            return await self._existing_submission(session)

        if session.state == QuoteState.INCOMPLETE:
            messages = "; ".join(e.message for e in session.validation_errors)
            return Err(f"Quote is incomplete: {messages}")

        catalog_result = await self._catalog_for(session)
        if isinstance(catalog_result, Err):
            return catalog_result
        catalog = catalog_result.unwrap()

        try:
            breakdown = compute_quote(catalog, session.selection)
        except ArithmeticError:
            logger.exception("Pricing failed while submitting session %s", session_id)
            return Err("Unable to price this quote")

        owner_result = await self._check_owner_quota(session)
        if isinstance(owner_result, Err):
            return owner_result
        owner = owner_result.unwrap()

        lead_result = await self._lead_service.create_lead(
            LeadCreate(
                calculator_instance_id=session.calculator_instance_id,
                vertical=session.vertical,
                contact=contact,
                quote_data=breakdown,
            )
        )
        if isinstance(lead_result, Err):
            return lead_result
        lead = lead_result.unwrap()

        if owner is not None:
            await self._billing_service.record_quote(owner.id)

        session = session.model_copy(
            update={
                "state": QuoteState.LOCKED,
                "breakdown": breakdown,
                "lead_id": lead.id,
                "last_updated": datetime.now(timezone.utc),
            }
        )
        await self._save_session(session)
        logger.info("Session %s locked as lead %s", session_id, lead.id)

        owner_email = str(owner.email) if owner is not None else None
        try:
            await self._notifier.send_quote(lead, catalog.name, owner_email)
        except NotificationDeliveryError as e:
            logger.error(
                "Lead %s stored but its notification failed: %s", lead.id, e.message
            )
            session = session.model_copy(update={"notification_error": e.message})
        else:
            lead = (await self._lead_service.mark_notification_sent(lead.id)).unwrap()
            session = session.model_copy(update={"notification_sent": True})
        await self._save_session(session)

        return Ok(QuoteSubmission(session=session, lead=lead))

    async def _load_open_session(self, session_id: UUID) -> Result[QuoteSession, str]:
        session_result = await self.get_session(session_id)
        if isinstance(session_result, Err):
            return session_result
        session = session_result.unwrap()
        if session is None:
            return Err("Session not found or expired")
        if session.state == QuoteState.LOCKED:
            return Err("Quote has already been submitted")
        return Ok(session)

    async def _catalog_for(self, session: QuoteSession) -> Result[OptionCatalog, str]:
        """The catalog a session prices against, with instance overrides."""
        if session.calculator_instance_id is None:
            return self._catalog_store.get_catalog(session.vertical)

        instance = (
            await self._calculator_service.get_instance(session.calculator_instance_id)
        ).unwrap()
        if instance is None or not instance.is_active:
            return Err("Calculator is no longer available")
        return await self._calculator_service.effective_catalog(instance)

    async def _check_owner_quota(
        self, session: QuoteSession
    ) -> Result[Account | None, str]:
        if session.calculator_instance_id is None:
            return Ok(None)
        instance = (
            await self._calculator_service.get_instance(session.calculator_instance_id)
        ).unwrap()
        if instance is None:
            return Err("Calculator is no longer available")

        account = (await self._billing_service.get_account(instance.owner_id)).unwrap()
        if account is None:
            return Err("Calculator owner account not found")

        quota_result = await self._billing_service.check_quota(account.id)
        if isinstance(quota_result, Err):
            logger.info("Quota reached for account %s", account.id)
            raise QuotaExceededError(quota_result.unwrap_err())
        return Ok(account)

    async def _existing_submission(
        self, session: QuoteSession
    ) -> Result[QuoteSubmission, str]:
        if session.lead_id is None:
            return Err("Locked session has no lead")
        lead = (await self._lead_service.get_lead(session.lead_id)).unwrap()
        if lead is None:
            return Err("Lead not found")
        return Ok(QuoteSubmission(session=session, lead=lead, already_submitted=True))

    def _refresh(
        self, session: QuoteSession, catalog: OptionCatalog, selection: Selection
    ) -> QuoteSession:
        """Recompute preview, validation errors and state for a selection."""
        breakdown = session.breakdown
        try:
            breakdown = compute_quote(catalog, selection)
        except ArithmeticError:
            logger.exception(
                "Pricing failed for session %s; keeping last good preview",
                session.session_id,
            )

        missing: list[FieldError] = find_missing_fields(catalog, selection)
        return session.model_copy(
            update={
                "selection": selection,
                "breakdown": breakdown,
                "validation_errors": missing,
                "state": QuoteState.INCOMPLETE if missing else QuoteState.COMPLETE,
                "last_updated": datetime.now(timezone.utc),
            }
        )

    async def _save_session(self, session: QuoteSession) -> None:
        cache_key = f"{self._cache_prefix}{session.session_id}"
        await self._cache.set(cache_key, session.model_dump_json(), self._session_ttl)

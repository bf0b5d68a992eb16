"""Lead persistence service."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from beartype import beartype

from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.lead import Lead, LeadCreate, LeadStatus

logger = get_logger(__name__)


class LeadService:
    """CRUD over leads held in process memory.

    Leads are immutable records; updates replace the stored instance.
    """

    def __init__(self) -> None:
        """Initialize an empty lead store."""
        self._leads: dict[UUID, Lead] = {}

    @beartype
    async def create_lead(self, lead_data: LeadCreate) -> Result[Lead, str]:
        """Persist a finalized quote with contact details."""
        now = datetime.now(timezone.utc)
        lead = Lead(
            id=uuid4(),
            calculator_instance_id=lead_data.calculator_instance_id,
            vertical=lead_data.vertical,
            name=lead_data.contact.name,
            email=lead_data.contact.email,
            phone=lead_data.contact.phone,
            quote_data=lead_data.quote_data,
            estimated_value=lead_data.quote_data.total,
            created_at=now,
            updated_at=now,
        )
        self._leads[lead.id] = lead
        logger.info(
            "Lead %s created for %s (estimated %s)",
            lead.id,
            lead.vertical,
            lead.quote_data.formatted_total,
        )
        return Ok(lead)

    @beartype
    async def get_lead(self, lead_id: UUID) -> Result[Lead | None, str]:
        """Get lead by ID."""
        return Ok(self._leads.get(lead_id))

    @beartype
    async def list_leads(
        self,
        calculator_instance_id: UUID | None = None,
        status: LeadStatus | None = None,
    ) -> Result[list[Lead], str]:
        """Leads newest first, optionally filtered."""
        leads = [
            lead
            for lead in self._leads.values()
            if (
                calculator_instance_id is None
                or lead.calculator_instance_id == calculator_instance_id
            )
            and (status is None or lead.status == status)
        ]
        leads.sort(key=lambda lead: lead.created_at, reverse=True)
        return Ok(leads)

    @beartype
    async def update_status(self, lead_id: UUID, status: LeadStatus) -> Result[Lead, str]:
        """Move a lead through the sales pipeline."""
        return self._replace(lead_id, status=status)

    @beartype
    async def mark_notification_sent(self, lead_id: UUID) -> Result[Lead, str]:
        """Record that the quote email went out."""
        return self._replace(lead_id, notification_sent=True)

    def _replace(self, lead_id: UUID, **changes: object) -> Result[Lead, str]:
        lead = self._leads.get(lead_id)
        if lead is None:
            return Err("Lead not found")
        updated = lead.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._leads[lead_id] = updated
        return Ok(updated)

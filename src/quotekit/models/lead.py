"""Lead models: a finalized quote plus the submitter's contact details."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field, field_validator

from .base import BaseModelConfig, IdentifiableModel
from .quote import QuoteBreakdown


class LeadStatus(str, Enum):
    """Sales pipeline status of a lead."""

    NEW = "new"
    CONTACTED = "contacted"
    WON = "won"
    LOST = "lost"


@beartype
class ContactInfo(BaseModelConfig):
    """Contact details collected when a quote is submitted."""

    name: str = Field(..., min_length=1, max_length=200, description="Full name")
    email: EmailStr = Field(..., description="Email address")
    phone: str | None = Field(None, max_length=30, description="Phone number")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Allow digits, spaces and the usual separators only."""
        if not v:
            return None
        allowed = set("0123456789+-() .")
        if not set(v) <= allowed or sum(ch.isdigit() for ch in v) < 6:
            raise ValueError("Invalid phone number")
        return v


@beartype
class LeadCreate(BaseModelConfig):
    """Data required to persist a lead."""

    calculator_instance_id: UUID | None = Field(
        None, description="Calculator instance the quote came from"
    )
    vertical: str = Field(..., min_length=1, description="Vertical of the quote")
    contact: ContactInfo = Field(..., description="Submitter contact details")
    quote_data: QuoteBreakdown = Field(..., description="Finalized breakdown")


@beartype
class Lead(IdentifiableModel):
    """Persisted lead record."""

    calculator_instance_id: UUID | None = Field(
        None, description="Calculator instance the quote came from"
    )
    vertical: str = Field(..., min_length=1, description="Vertical of the quote")
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = None
    quote_data: QuoteBreakdown
    estimated_value: Decimal = Field(..., ge=Decimal("0"))
    status: LeadStatus = LeadStatus.NEW
    notification_sent: bool = False

"""Business accounts and their subscription tier."""

from enum import Enum

from beartype import beartype
from pydantic import EmailStr, Field

from .base import BaseModelConfig, IdentifiableModel


class SubscriptionTier(str, Enum):
    """Subscription plans."""

    FREE = "free"
    STARTER = "starter"
    PRO = "pro"
    ENTERPRISE = "enterprise"


# None means unlimited
MONTHLY_QUOTE_LIMITS: dict[SubscriptionTier, int | None] = {
    SubscriptionTier.FREE: 5,
    SubscriptionTier.STARTER: 20,
    SubscriptionTier.PRO: 100,
    SubscriptionTier.ENTERPRISE: None,
}


@beartype
class AccountCreate(BaseModelConfig):
    """Data required to register an account."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    tier: SubscriptionTier = SubscriptionTier.FREE


@beartype
class Account(IdentifiableModel):
    """A business using QuoteKit."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    tier: SubscriptionTier = SubscriptionTier.FREE
    quotes_used_this_month: int = Field(default=0, ge=0)
    usage_month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")

    @property
    def quote_limit(self) -> int | None:
        """Monthly quote limit for the tier, None when unlimited."""
        return MONTHLY_QUOTE_LIMITS[self.tier]

    @property
    def quotes_remaining(self) -> int | None:
        """Quotes left this month, None when unlimited."""
        limit = self.quote_limit
        if limit is None:
            return None
        return max(0, limit - self.quotes_used_this_month)

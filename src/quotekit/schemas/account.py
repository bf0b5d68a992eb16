"""Account schemas."""

from pydantic import Field

from ..models.account import Account, SubscriptionTier
from ..models.base import BaseModelConfig


class TierChangeRequest(BaseModelConfig):
    """Move an account to another plan."""

    tier: SubscriptionTier


class AccountResponse(BaseModelConfig):
    """Account with its quota position."""

    account: Account
    quote_limit: int | None = Field(None, description="Monthly limit, null if unlimited")
    quotes_remaining: int | None = Field(
        None, description="Quotes left this month, null if unlimited"
    )

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        """Build the response for an account."""
        return cls(
            account=account,
            quote_limit=account.quote_limit,
            quotes_remaining=account.quotes_remaining,
        )

"""Accounts, subscription tiers and monthly quote quotas."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from beartype import beartype

from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.account import Account, AccountCreate, SubscriptionTier

logger = get_logger(__name__)


def current_usage_month(now: datetime | None = None) -> str:
    """Calendar month used to bucket quote usage, as ``YYYY-MM``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


class BillingService:
    """Tier bookkeeping for accounts.

    Usage counters reset lazily: the first read in a new calendar month
    starts the count from zero.
    """

    def __init__(self) -> None:
        """Initialize an empty account store."""
        self._accounts: dict[UUID, Account] = {}

    @beartype
    async def register_account(self, account_data: AccountCreate) -> Result[Account, str]:
        """Create an account on the requested tier."""
        email = account_data.email.lower()
        if any(a.email.lower() == email for a in self._accounts.values()):
            return Err("An account with this email already exists")

        now = datetime.now(timezone.utc)
        account = Account(
            id=uuid4(),
            email=account_data.email,
            full_name=account_data.full_name,
            tier=account_data.tier,
            usage_month=current_usage_month(now),
            created_at=now,
            updated_at=now,
        )
        self._accounts[account.id] = account
        logger.info("Account %s registered on %s tier", account.id, account.tier.value)
        return Ok(account)

    @beartype
    async def get_account(self, account_id: UUID) -> Result[Account | None, str]:
        """Get an account with its usage rolled to the current month."""
        account = self._accounts.get(account_id)
        if account is None:
            return Ok(None)
        return Ok(self._roll_month(account))

    @beartype
    async def change_tier(
        self, account_id: UUID, tier: SubscriptionTier
    ) -> Result[Account, str]:
        """Move an account to another plan; usage this month is kept."""
        account = self._accounts.get(account_id)
        if account is None:
            return Err("Account not found")
        updated = self._save(self._roll_month(account), tier=tier)
        logger.info(
            "Account %s moved from %s to %s", account_id, account.tier.value, tier.value
        )
        return Ok(updated)

    @beartype
    async def check_quota(self, account_id: UUID) -> Result[Account, str]:
        """Ok when the account may produce another quote this month."""
        account = self._accounts.get(account_id)
        if account is None:
            return Err("Account not found")
        account = self._roll_month(account)
        limit = account.quote_limit
        if limit is not None and account.quotes_used_this_month >= limit:
            return Err(
                f"Monthly quote limit of {limit} reached for the "
                f"{account.tier.value} plan"
            )
        return Ok(account)

    @beartype
    async def record_quote(self, account_id: UUID) -> Result[Account, str]:
        """Count one submitted quote against the account."""
        account = self._accounts.get(account_id)
        if account is None:
            return Err("Account not found")
        account = self._roll_month(account)
        return Ok(
            self._save(
                account, quotes_used_this_month=account.quotes_used_this_month + 1
            )
        )

    def _roll_month(self, account: Account) -> Account:
        month = current_usage_month()
        if account.usage_month == month:
            return account
        logger.debug("Resetting quote usage for account %s (%s)", account.id, month)
        return self._save(account, usage_month=month, quotes_used_this_month=0)

    def _save(self, account: Account, **changes: object) -> Account:
        updated = account.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._accounts[account.id] = updated
        return updated

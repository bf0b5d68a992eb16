"""Tests for account tiers and quotas."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from quotekit.models.account import AccountCreate, SubscriptionTier
from quotekit.services import billing_service as billing_module
from quotekit.services.billing_service import BillingService, current_usage_month


async def _register(
    service: BillingService, tier: SubscriptionTier = SubscriptionTier.FREE
):
    result = await service.register_account(
        AccountCreate(email=f"{uuid4().hex}@example.com", full_name="Owner", tier=tier)
    )
    return result.unwrap()


class TestAccounts:
    """Registration and tier changes."""

    async def test_register(self, billing_service: BillingService) -> None:
        """New accounts start with no usage in the current month."""
        account = await _register(billing_service)

        assert account.tier == SubscriptionTier.FREE
        assert account.quotes_used_this_month == 0
        assert account.usage_month == current_usage_month()

    async def test_duplicate_email(self, billing_service: BillingService) -> None:
        """Emails are unique, case-insensitively."""
        await billing_service.register_account(
            AccountCreate(email="owner@example.com", full_name="Owner")
        )

        result = await billing_service.register_account(
            AccountCreate(email="OWNER@example.com", full_name="Other")
        )

        assert result.is_err()

    async def test_change_tier(self, billing_service: BillingService) -> None:
        """Tier changes keep the month's usage."""
        account = await _register(billing_service)
        await billing_service.record_quote(account.id)

        updated = (
            await billing_service.change_tier(account.id, SubscriptionTier.PRO)
        ).unwrap()

        assert updated.tier == SubscriptionTier.PRO
        assert updated.quotes_used_this_month == 1
        assert updated.quote_limit == 100

    async def test_unknown_account(self, billing_service: BillingService) -> None:
        """Unknown accounts give None or Err."""
        assert (await billing_service.get_account(uuid4())).unwrap() is None
        assert (await billing_service.check_quota(uuid4())).is_err()
        assert (await billing_service.record_quote(uuid4())).is_err()
        assert (
            await billing_service.change_tier(uuid4(), SubscriptionTier.PRO)
        ).is_err()


class TestQuota:
    """Monthly quote allowance."""

    async def test_free_tier_limit(self, billing_service: BillingService) -> None:
        """The sixth quote on the free tier is refused."""
        account = await _register(billing_service)
        for _ in range(5):
            assert (await billing_service.check_quota(account.id)).is_ok()
            await billing_service.record_quote(account.id)

        result = await billing_service.check_quota(account.id)

        assert result.is_err()
        assert "limit of 5" in result.unwrap_err()

    async def test_enterprise_unlimited(self, billing_service: BillingService) -> None:
        """Enterprise accounts have no limit."""
        account = await _register(billing_service, SubscriptionTier.ENTERPRISE)
        for _ in range(150):
            await billing_service.record_quote(account.id)

        assert (await billing_service.check_quota(account.id)).is_ok()

    async def test_usage_resets_each_month(
        self, billing_service: BillingService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A new calendar month starts from zero."""
        account = await _register(billing_service)
        for _ in range(5):
            await billing_service.record_quote(account.id)
        assert (await billing_service.check_quota(account.id)).is_err()

        monkeypatch.setattr(billing_module, "current_usage_month", lambda: "2099-01")

        refreshed = (await billing_service.check_quota(account.id)).unwrap()
        assert refreshed.quotes_used_this_month == 0
        assert refreshed.usage_month == "2099-01"


def test_current_usage_month_format() -> None:
    """Usage months are YYYY-MM."""
    assert current_usage_month(datetime(2026, 3, 9, tzinfo=timezone.utc)) == "2026-03"

"""Tests for quote email delivery."""

import smtplib
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from quotekit.core.config import Settings
from quotekit.core.exceptions import NotificationDeliveryError
from quotekit.models.catalog import OptionCatalog
from quotekit.models.lead import Lead
from quotekit.models.selection import Selection
from quotekit.services.notification_service import (
    NotificationService,
    format_amount,
    render_html,
    render_text,
)
from quotekit.services.pricing import compute_quote


@pytest.fixture
def lead(portrait_catalog: OptionCatalog) -> Lead:
    """A lead with a discounted portrait quote."""
    breakdown = compute_quote(
        portrait_catalog,
        Selection(
            field_values={"duration": "1-hour", "location": "outdoor"},
            promo_code="portrait10",
        ),
    )
    now = datetime.now(timezone.utc)
    return Lead(
        id=uuid4(),
        vertical=portrait_catalog.vertical,
        name="Grace <Hopper>",
        email="grace@example.com",
        quote_data=breakdown,
        estimated_value=breakdown.total,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def smtp_settings() -> Settings:
    """Settings with SMTP configured."""
    return Settings(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_user="mailer",
        smtp_password="secret",
        smtp_sender="Quotes <quotes@example.com>",
    )


class TestRendering:
    """Text and HTML bodies."""

    def test_format_amount(self, lead: Lead) -> None:
        """Negative amounts keep the sign in front of the symbol."""
        assert format_amount(lead.quote_data, Decimal("-28.50")) == "-€28.50"
        assert format_amount(lead.quote_data, Decimal("5")) == "€5.00"

    def test_text_lists_items_in_order(self, lead: Lead) -> None:
        """Every line item appears, followed by the total."""
        text = render_text(lead, "Portrait Photography")

        labels = [item.label for item in lead.quote_data.line_items]
        positions = [text.index(label) for label in labels]
        assert positions == sorted(positions)
        assert "Total: €256.50" in text
        assert str(lead.id) in text

    def test_html_escapes_user_input(self, lead: Lead) -> None:
        """Names are escaped in HTML."""
        html = render_html(lead, "Portrait Photography")

        assert "Grace &lt;Hopper&gt;" in html
        assert "€256.50" in html


class TestDelivery:
    """SMTP transport."""

    async def test_logs_instead_of_sending_without_smtp(
        self, settings: Settings, lead: Lead
    ) -> None:
        """Development mode never opens a connection."""
        factory = MagicMock()
        service = NotificationService(settings, smtp_factory=factory)

        await service.send_quote(lead, "Portrait Photography")

        factory.assert_not_called()

    async def test_sends_over_smtp(self, smtp_settings: Settings, lead: Lead) -> None:
        """STARTTLS, login, then one message with the owner in Bcc."""
        factory = MagicMock()
        smtp = factory.return_value.__enter__.return_value
        service = NotificationService(smtp_settings, smtp_factory=factory)

        await service.send_quote(lead, "Portrait Photography", "owner@example.com")

        factory.assert_called_once_with("smtp.example.com", 2525, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("mailer", "secret")
        message = smtp.send_message.call_args.args[0]
        assert message["To"] == "grace@example.com"
        assert message["Bcc"] == "owner@example.com"
        assert "€256.50" in message["Subject"]

    async def test_transport_failure_raises(
        self, smtp_settings: Settings, lead: Lead
    ) -> None:
        """SMTP errors become NotificationDeliveryError."""
        factory = MagicMock()
        smtp = factory.return_value.__enter__.return_value
        smtp.send_message.side_effect = smtplib.SMTPException("relay denied")
        service = NotificationService(smtp_settings, smtp_factory=factory)

        with pytest.raises(NotificationDeliveryError) as exc_info:
            await service.send_quote(lead, "Portrait Photography")

        assert exc_info.value.details == ["relay denied"]

    async def test_connection_failure_raises(
        self, smtp_settings: Settings, lead: Lead
    ) -> None:
        """Network errors are delivery errors too."""
        factory = MagicMock(side_effect=ConnectionRefusedError("refused"))
        service = NotificationService(smtp_settings, smtp_factory=factory)

        with pytest.raises(NotificationDeliveryError):
            await service.send_quote(lead, "Portrait Photography")

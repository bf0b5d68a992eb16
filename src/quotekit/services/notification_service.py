"""Quote email delivery over SMTP."""

import asyncio
import smtplib
from collections.abc import Callable
from decimal import Decimal
from email.message import EmailMessage
from html import escape

from beartype import beartype

from ..core.config import Settings
from ..core.exceptions import NotificationDeliveryError
from ..core.logging_utils import get_logger
from ..models.lead import Lead
from ..models.quote import QuoteBreakdown

logger = get_logger(__name__)


@beartype
def format_amount(breakdown: QuoteBreakdown, amount: Decimal) -> str:
    """Amount with currency symbol; negatives as '-€10.00'."""
    symbol = breakdown.currency.symbol
    text = f"{abs(amount):.2f}"
    return f"-{symbol}{text}" if amount < 0 else f"{symbol}{text}"


@beartype
def render_text(lead: Lead, calculator_name: str) -> str:
    """Plain-text quote summary, line items in evaluation order."""
    breakdown = lead.quote_data
    lines = [
        f"Hi {lead.name},",
        "",
        f"Thank you for requesting a quote for {calculator_name}.",
        "",
    ]
    for item in breakdown.line_items:
        lines.append(f"  {item.label}: {format_amount(breakdown, item.amount)}")
    lines.extend(
        [
            "",
            f"Subtotal: {format_amount(breakdown, breakdown.subtotal)}",
            f"Total: {format_amount(breakdown, breakdown.total)}",
            "",
            f"Quote reference: {lead.id}",
        ]
    )
    return "\n".join(lines) + "\n"


@beartype
def render_html(lead: Lead, calculator_name: str) -> str:
    """Minimal HTML version of the quote summary."""
    breakdown = lead.quote_data
    rows = "".join(
        f"<tr><td>{escape(item.label)}</td>"
        f"<td align=\"right\">{escape(format_amount(breakdown, item.amount))}</td>"
        "</tr>"
        for item in breakdown.line_items
    )
    total = escape(format_amount(breakdown, breakdown.total))
    return (
        f"<p>Hi {escape(lead.name)},</p>"
        f"<p>Thank you for requesting a quote for {escape(calculator_name)}.</p>"
        f"<table>{rows}"
        f"<tr><th>Total</th><th align=\"right\">{total}</th></tr></table>"
        f"<p>Quote reference: {lead.id}</p>"
    )


class NotificationService:
    """Send quote breakdowns to the lead and, when known, the business owner.

    Without an SMTP host the message is only logged, which keeps local
    development free of mail infrastructure.
    """

    def __init__(
        self,
        settings: Settings,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        """Initialize with settings and an SMTP connection factory."""
        self._settings = settings
        self._smtp_factory = smtp_factory

    @beartype
    def build_message(
        self, lead: Lead, calculator_name: str, owner_email: str | None = None
    ) -> EmailMessage:
        """Build the quote email."""
        message = EmailMessage()
        message["Subject"] = (
            f"Your {calculator_name} quote: {lead.quote_data.formatted_total}"
        )
        message["From"] = self._settings.smtp_sender
        message["To"] = str(lead.email)
        if owner_email:
            message["Bcc"] = owner_email
        message.set_content(render_text(lead, calculator_name))
        message.add_alternative(render_html(lead, calculator_name), subtype="html")
        return message

    @beartype
    async def send_quote(
        self, lead: Lead, calculator_name: str, owner_email: str | None = None
    ) -> None:
        """Deliver the quote email.

        Raises:
            NotificationDeliveryError: the SMTP transport failed.
        """
        message = self.build_message(lead, calculator_name, owner_email)

        if not self._settings.email_enabled:
            logger.info(
                "SMTP not configured; quote email for lead %s not sent:\n%s",
                lead.id,
                render_text(lead, calculator_name),
            )
            return

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Quote email for lead %s failed: %s", lead.id, e)
            raise NotificationDeliveryError(
                f"Could not deliver quote email for lead {lead.id}", [str(e)]
            ) from e

        logger.info("Quote email for lead %s sent to %s", lead.id, lead.email)

    def _deliver(self, message: EmailMessage) -> None:
        settings = self._settings
        with self._smtp_factory(
            settings.smtp_host, settings.smtp_port, timeout=30
        ) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_user and settings.smtp_password:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(message)

"""Exceptions for conditions that must fail loudly.

Expected, recoverable outcomes travel as ``Err`` results; the errors below
cover the cases where returning a price would be wrong.
"""

from typing import Any

from beartype import beartype


class QuoteKitError(Exception):
    """Base class for QuoteKit domain errors."""

    code = "quotekit_error"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        """Initialize with a human readable message and optional details."""
        self.message = message
        self.details = details or []
        super().__init__(message)

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to an API error body."""
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = list(self.details)
        return body


class CatalogMismatchError(QuoteKitError):
    """A selection references fields or options the catalog does not have.

    Raised when client-side state is stale; the caller must refetch the
    catalog and discard the selection.
    """

    code = "catalog_mismatch"

    def __init__(
        self,
        vertical: str,
        message: str,
        details: list[str] | None = None,
    ) -> None:
        """Record the vertical whose catalog no longer matches."""
        self.vertical = vertical
        super().__init__(message, details)

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Include the vertical so clients know which catalog to refetch."""
        body = super().to_dict()
        body["vertical"] = self.vertical
        return body


class MalformedCatalogError(QuoteKitError):
    """A catalog violates its structural invariants (operator error)."""

    code = "malformed_catalog"

    def __init__(self, vertical: str, violations: list[str]) -> None:
        """Collect every violated invariant."""
        self.vertical = vertical
        super().__init__(
            f"Catalog '{vertical}' is malformed: {len(violations)} violation(s)",
            violations,
        )


class NotificationDeliveryError(QuoteKitError):
    """The quote email could not be delivered."""

    code = "notification_delivery_failed"


class ExtractionError(QuoteKitError):
    """Natural-language pre-fill failed."""

    code = "extraction_failed"


class QuotaExceededError(QuoteKitError):
    """The account has used its monthly quote allowance."""

    code = "quota_exceeded"

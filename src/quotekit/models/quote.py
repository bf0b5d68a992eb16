"""Quote breakdown models produced by the pricing engine."""

from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig
from .catalog import Currency, FieldId


class LineItemKind(str, Enum):
    """Where a line item came from."""

    BASE = "base"
    OPTION = "option"
    SURCHARGE = "surcharge"
    ADD_ON = "add_on"
    DISCOUNT = "discount"


@beartype
class LineItem(BaseModelConfig):
    """One labeled monetary contribution."""

    label: str = Field(..., min_length=1, max_length=300, description="Display label")
    amount: Decimal = Field(..., description="Amount, negative for discounts")
    kind: LineItemKind = Field(..., description="Line item kind")
    field_id: FieldId | None = Field(None, description="Originating field")


@beartype
class QuoteBreakdown(BaseModelConfig):
    """Price breakdown for one selection.

    Line items are in evaluation order. ``subtotal`` is the pre-discount
    total, ``total`` is never negative.
    """

    line_items: list[LineItem] = Field(..., description="Line items in order")
    subtotal: Decimal = Field(..., description="Total before discount")
    discount: Decimal = Field(..., ge=Decimal("0"), description="Discount deducted")
    total: Decimal = Field(..., ge=Decimal("0"), description="Amount due")
    currency: Currency = Field(..., description="Currency of all amounts")

    @model_validator(mode="after")
    def validate_total(self) -> "QuoteBreakdown":
        """Total is the subtotal less discount, clamped at zero."""
        expected = max(Decimal("0"), self.subtotal - self.discount)
        if abs(self.total - expected) > Decimal("0.01"):
            raise ValueError(
                f"total {self.total} does not match subtotal - discount ({expected})"
            )
        return self

    @property
    def formatted_total(self) -> str:
        """Total with currency symbol, e.g. '€292.50'."""
        return f"{self.currency.symbol}{self.total:.2f}"

    def charges(self) -> list[LineItem]:
        """Line items other than discounts."""
        return [item for item in self.line_items if item.kind != LineItemKind.DISCOUNT]

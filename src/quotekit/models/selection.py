"""User selections against an option catalog."""

from beartype import beartype
from pydantic import Field, field_validator

from .base import BaseModelConfig
from .catalog import FieldId, OptionId

FieldValue = OptionId | frozenset[OptionId]


@beartype
class Selection(BaseModelConfig):
    """Field values chosen so far plus an optional promo code.

    Single-select fields hold one option id, the add-on field holds a set.
    Empty strings and empty sets count as unset.
    """

    field_values: dict[FieldId, FieldValue] = Field(
        default_factory=dict, description="Selected option id(s) per field"
    )
    promo_code: str | None = Field(None, max_length=50, description="Promo code")

    @field_validator("promo_code")
    @classmethod
    def blank_promo_is_none(cls, v: str | None) -> str | None:
        """Treat an empty promo code as absent."""
        return v or None

    @beartype
    def is_set(self, field_id: FieldId) -> bool:
        """Whether the field has a non-empty value."""
        return bool(self.field_values.get(field_id))

    @beartype
    def with_value(self, field_id: FieldId, value: FieldValue) -> "Selection":
        """Return a new selection with one field changed."""
        values = dict(self.field_values)
        values[field_id] = value
        return self.model_copy(update={"field_values": values})

    @beartype
    def without_value(self, field_id: FieldId) -> "Selection":
        """Return a new selection with one field cleared."""
        values = {k: v for k, v in self.field_values.items() if k != field_id}
        return self.model_copy(update={"field_values": values})

    @beartype
    def with_promo_code(self, promo_code: str | None) -> "Selection":
        """Return a new selection with the promo code replaced."""
        return self.model_copy(update={"promo_code": promo_code or None})

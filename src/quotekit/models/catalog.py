"""Option catalog models.

A catalog describes one vertical: the selectable fields, their options and
the price effect of each option. Catalogs are configuration data and are
immutable at request time.
"""

from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig

FieldId = str
OptionId = str

# Largest amount, multiplier or factor a catalog may configure.
MAX_EFFECT_VALUE = Decimal("1000000000")


class EffectKind(str, Enum):
    """How an option changes the price."""

    FLAT = "flat"
    PERCENTAGE_OF_RUNNING_TOTAL = "percentage_of_running_total"
    MULTIPLIER_ON_BASE = "multiplier_on_base"
    BASE_FACTOR = "base_factor"


EFFECT_VALUE_ATTRIBUTE: dict[EffectKind, str] = {
    EffectKind.FLAT: "amount",
    EffectKind.PERCENTAGE_OF_RUNNING_TOTAL: "percentage",
    EffectKind.MULTIPLIER_ON_BASE: "multiplier",
    EffectKind.BASE_FACTOR: "factor",
}


@beartype
class Currency(BaseModelConfig):
    """Currency used for every amount in a catalog."""

    code: str = Field(..., pattern=r"^[A-Z]{3}$", description="ISO 4217 code")
    symbol: str = Field(..., min_length=1, max_length=5, description="Display symbol")


@beartype
class OptionEffect(BaseModelConfig):
    """Price effect of selecting an option.

    Exactly one value attribute is set, the one matching ``kind``:

    - ``amount`` for ``flat``
    - ``percentage`` (a fraction, 0.10 = 10%) for ``percentage_of_running_total``
    - ``multiplier`` for ``multiplier_on_base``
    - ``factor`` for ``base_factor``
    """

    kind: EffectKind = Field(..., description="Effect kind")
    amount: Decimal | None = Field(None, description="Flat amount added")
    percentage: Decimal | None = Field(
        None, description="Fraction of the running total added"
    )
    multiplier: Decimal | None = Field(None, description="Multiplier on the base")
    factor: Decimal | None = Field(
        None, description="Factor of the derived base rate"
    )

    @model_validator(mode="after")
    def validate_value_matches_kind(self) -> "OptionEffect":
        """Exactly the attribute belonging to ``kind`` must be present."""
        expected = EFFECT_VALUE_ATTRIBUTE[self.kind]
        for attribute in EFFECT_VALUE_ATTRIBUTE.values():
            value = getattr(self, attribute)
            if attribute == expected and value is None:
                raise ValueError(f"{self.kind.value} effect requires '{attribute}'")
            if attribute != expected and value is not None:
                raise ValueError(
                    f"{self.kind.value} effect must not set '{attribute}'"
                )
        return self

    @property
    def value(self) -> Decimal:
        """The numeric value of the effect."""
        return getattr(self, EFFECT_VALUE_ATTRIBUTE[self.kind])

    @classmethod
    def flat(cls, amount: Decimal | int | str) -> "OptionEffect":
        """Build a flat effect."""
        return cls(kind=EffectKind.FLAT, amount=Decimal(str(amount)))

    @classmethod
    def percentage_of_running_total(
        cls, percentage: Decimal | float | int | str
    ) -> "OptionEffect":
        """Build a percentage surcharge effect."""
        return cls(
            kind=EffectKind.PERCENTAGE_OF_RUNNING_TOTAL,
            percentage=Decimal(str(percentage)),
        )

    @classmethod
    def multiplier_on_base(
        cls, multiplier: Decimal | float | int | str
    ) -> "OptionEffect":
        """Build a base multiplier effect."""
        return cls(
            kind=EffectKind.MULTIPLIER_ON_BASE, multiplier=Decimal(str(multiplier))
        )

    @classmethod
    def base_factor(cls, factor: Decimal | float | int | str) -> "OptionEffect":
        """Build a base-rate factor effect."""
        return cls(kind=EffectKind.BASE_FACTOR, factor=Decimal(str(factor)))


@beartype
class Option(BaseModelConfig):
    """A selectable option."""

    id: OptionId = Field(..., min_length=1, max_length=100, description="Option id")
    label: str = Field(..., min_length=1, max_length=200, description="Display label")
    effect: OptionEffect = Field(..., description="Price effect")


@beartype
class OptionGroup(BaseModelConfig):
    """Ordered options for one form field."""

    label: str = Field(..., min_length=1, max_length=200, description="Field label")
    required: bool = Field(default=True, description="Must be set to finalize")
    multi_select: bool = Field(
        default=False, description="Add-on group where any subset may be chosen"
    )
    options: list[Option] = Field(..., min_length=1, description="Options in order")

    def get_option(self, option_id: OptionId) -> Option | None:
        """Find an option by id."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    @property
    def option_ids(self) -> list[OptionId]:
        """Option ids in catalog order."""
        return [option.id for option in self.options]

    @property
    def is_base_factor_group(self) -> bool:
        """Whether this group contributes to the derived base rate."""
        return any(o.effect.kind == EffectKind.BASE_FACTOR for o in self.options)


@beartype
class OptionCatalog(BaseModelConfig):
    """Per-vertical pricing configuration."""

    vertical: str = Field(
        ...,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Vertical identifier (slug)",
    )
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    category: str = Field(default="services", min_length=1, description="Category")
    description: str | None = Field(None, max_length=1000, description="Description")
    base_rate: Decimal | None = Field(
        None,
        ge=Decimal("0"),
        le=MAX_EFFECT_VALUE,
        description="Starting price; absent when the base is derived from factors",
    )
    currency: Currency = Field(..., description="Currency for all amounts")
    groups: dict[FieldId, OptionGroup] = Field(
        ..., description="Option groups keyed by field id, in evaluation order"
    )
    promo_codes: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Promo code to discount fraction",
    )

    @field_validator("groups")
    @classmethod
    def validate_groups_present(
        cls, v: dict[FieldId, OptionGroup]
    ) -> dict[FieldId, OptionGroup]:
        """A catalog without fields cannot price anything."""
        if not v:
            raise ValueError("Catalog must define at least one option group")
        return v

    @property
    def add_on_field(self) -> FieldId | None:
        """Field id of the multi-select add-on group, if any."""
        for field_id, group in self.groups.items():
            if group.multi_select:
                return field_id
        return None

    @property
    def required_fields(self) -> list[FieldId]:
        """Required field ids in catalog order."""
        return [field_id for field_id, group in self.groups.items() if group.required]

"""Calculator templates, embeddable instances and their branding."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from beartype import beartype
from pydantic import Field, field_validator

from .base import BaseModelConfig, IdentifiableModel
from .catalog import MAX_EFFECT_VALUE, FieldId, OptionId

_HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

BoundedValue = Annotated[Decimal, Field(le=MAX_EFFECT_VALUE)]


@beartype
class CalculatorTemplate(BaseModelConfig):
    """A vertical as offered to businesses."""

    slug: str = Field(..., min_length=1, description="Vertical identifier")
    name: str = Field(..., min_length=1, description="Display name")
    category: str = Field(..., min_length=1, description="Category")
    description: str | None = None


@beartype
class ThemeConfig(BaseModelConfig):
    """Branding for one calculator instance.

    Rendered into CSS scoped to the instance, never applied globally.
    """

    primary_color: str = Field(default="#10B981", pattern=_HEX_COLOR_PATTERN)
    secondary_color: str = Field(default="#334155", pattern=_HEX_COLOR_PATTERN)
    accent_color: str = Field(default="#F59E0B", pattern=_HEX_COLOR_PATTERN)
    font_family: str = Field(default="Inter, sans-serif", max_length=100)
    border_radius_px: int = Field(default=8, ge=0, le=48)
    logo_url: str | None = Field(None, max_length=2000)

    @field_validator("font_family")
    @classmethod
    def validate_font_family(cls, v: str) -> str:
        """Reject characters that could break out of a CSS declaration."""
        if any(ch in v for ch in ";{}<>"):
            raise ValueError("Invalid font family")
        return v

    @field_validator("logo_url")
    @classmethod
    def validate_logo_url(cls, v: str | None) -> str | None:
        """Logos must be served over http(s)."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Logo URL must be an http(s) URL")
        return v


@beartype
class CatalogOverrides(BaseModelConfig):
    """Per-instance price customisation on top of the vertical catalog."""

    base_rate: Decimal | None = Field(None, ge=Decimal("0"), le=MAX_EFFECT_VALUE)
    option_amounts: dict[FieldId, dict[OptionId, BoundedValue]] = Field(
        default_factory=dict,
        description="Replacement value for an option's effect",
    )
    promo_codes: dict[str, BoundedValue] = Field(
        default_factory=dict, description="Additional promo codes"
    )

    @property
    def is_empty(self) -> bool:
        """Whether nothing is overridden."""
        return (
            self.base_rate is None and not self.option_amounts and not self.promo_codes
        )


@beartype
class CalculatorInstanceCreate(BaseModelConfig):
    """Data required to create a calculator instance."""

    owner_id: UUID
    vertical: str = Field(..., min_length=1)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    overrides: CatalogOverrides = Field(default_factory=CatalogOverrides)


@beartype
class CalculatorInstanceUpdate(BaseModelConfig):
    """Mutable parts of a calculator instance."""

    theme: ThemeConfig | None = None
    overrides: CatalogOverrides | None = None
    is_active: bool | None = None


@beartype
class CalculatorInstance(IdentifiableModel):
    """A business's embeddable copy of a vertical calculator."""

    owner_id: UUID
    vertical: str = Field(..., min_length=1)
    embed_id: str = Field(..., min_length=8, max_length=64)
    theme: ThemeConfig
    overrides: CatalogOverrides
    is_active: bool = True

    @beartype
    def embed_url(self, base_url: str) -> str:
        """Public URL of the embeddable calculator."""
        return f"{base_url}/embed/{self.embed_id}"

    @beartype
    def admin_url(self, base_url: str) -> str:
        """Dashboard URL for customising the instance."""
        return f"{base_url}/dashboard/calculators/{self.id}"

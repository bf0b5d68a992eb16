"""Quote computation and quote session schemas."""

from pydantic import Field, model_validator

from ..models.base import BaseModelConfig
from ..models.lead import ContactInfo
from ..models.selection import FieldValue, Selection


class ComputeQuoteRequest(BaseModelConfig):
    """Price a selection against a vertical or an embedded calculator."""

    vertical: str | None = Field(None, description="Vertical slug")
    embed_id: str | None = Field(None, description="Calculator embed id")
    selection: Selection = Field(default_factory=Selection)

    @model_validator(mode="after")
    def one_catalog_source(self) -> "ComputeQuoteRequest":
        """Exactly one of vertical and embed_id identifies the catalog."""
        if (self.vertical is None) == (self.embed_id is None):
            raise ValueError("Provide either vertical or embed_id")
        return self


class SessionStartRequest(BaseModelConfig):
    """Start a session for a vertical or an embedded calculator."""

    vertical: str | None = Field(None, description="Vertical slug")
    embed_id: str | None = Field(None, description="Calculator embed id")

    @model_validator(mode="after")
    def one_catalog_source(self) -> "SessionStartRequest":
        """Exactly one of vertical and embed_id identifies the catalog."""
        if (self.vertical is None) == (self.embed_id is None):
            raise ValueError("Provide either vertical or embed_id")
        return self


class SessionUpdateRequest(BaseModelConfig):
    """Field changes for a session.

    Lists are accepted for the add-on field. An empty string or list
    unsets a field; ``promo_code`` of ``""`` removes the code.
    """

    field_values: dict[str, FieldValue] = Field(default_factory=dict)
    promo_code: str | None = Field(None, max_length=50)
    clear: list[str] = Field(default_factory=list)


class PrefillRequest(BaseModelConfig):
    """Free-text job description to pre-fill from."""

    free_text: str = Field(..., min_length=1, max_length=2000)


class SubmitRequest(BaseModelConfig):
    """Contact details for submission."""

    contact: ContactInfo

"""Calculator instance, embed and lead schemas."""

from pydantic import Field

from ..models.base import BaseModelConfig
from ..models.calculator import CalculatorInstance, ThemeConfig
from ..models.catalog import OptionCatalog
from ..models.lead import LeadStatus


class CalculatorResponse(BaseModelConfig):
    """A calculator instance with its public links."""

    instance: CalculatorInstance
    embed_url: str
    admin_url: str
    embed_code: str = Field(..., description="HTML snippet for the business site")


class EmbedResponse(BaseModelConfig):
    """Everything an embedded calculator needs to render."""

    embed_id: str
    vertical: str
    catalog: OptionCatalog = Field(..., description="Catalog with overrides applied")
    theme: ThemeConfig
    theme_css: str = Field(..., description="Theme variables scoped to the embed")


class LeadStatusUpdate(BaseModelConfig):
    """Move a lead through the pipeline."""

    status: LeadStatus

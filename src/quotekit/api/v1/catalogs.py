"""Catalog browsing endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...models.calculator import CalculatorTemplate
from ...models.catalog import OptionCatalog
from ...services.catalog_store import CatalogStore
from ..dependencies import get_catalog_store

router = APIRouter(prefix="/catalogs", tags=["catalogs"])


@router.get("", response_model=list[CalculatorTemplate])
@beartype
async def list_catalogs(
    category: str | None = None,
    catalog_store: CatalogStore = Depends(get_catalog_store),
) -> list[CalculatorTemplate]:
    """List the available calculator templates, optionally by category."""
    return catalog_store.list_templates(category=category)


@router.get("/{vertical}", response_model=OptionCatalog)
@beartype
async def get_catalog(
    vertical: str,
    catalog_store: CatalogStore = Depends(get_catalog_store),
) -> OptionCatalog:
    """Get the full option catalog for a vertical."""
    result = catalog_store.get_catalog(vertical)

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return result.unwrap()

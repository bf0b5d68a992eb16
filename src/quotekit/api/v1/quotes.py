"""Stateless quote computation endpoint."""

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...core.logging_utils import get_logger
from ...models.quote import QuoteBreakdown
from ...schemas.quote import ComputeQuoteRequest
from ...services.calculator_service import CalculatorService
from ...services.catalog_store import CatalogStore
from ...services.pricing import compute_quote
from ..dependencies import get_calculator_service, get_catalog_store

logger = get_logger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/compute", response_model=QuoteBreakdown)
@beartype
async def compute(
    request: ComputeQuoteRequest,
    catalog_store: CatalogStore = Depends(get_catalog_store),
    calculator_service: CalculatorService = Depends(get_calculator_service),
) -> QuoteBreakdown:
    """Price a selection.

    Catalog mismatches surface as 409 so the client refetches the catalog.
    """
    if request.embed_id is not None:
        instance = (await calculator_service.get_by_embed_id(request.embed_id)).unwrap()
        if instance is None:
            raise HTTPException(status_code=404, detail="Calculator not found")
        catalog_result = await calculator_service.effective_catalog(instance)
    else:
        catalog_result = catalog_store.get_catalog(request.vertical or "")

    if catalog_result.is_err():
        raise HTTPException(status_code=404, detail=catalog_result.err_value)

    catalog = catalog_result.unwrap()
    try:
        return compute_quote(catalog, request.selection)
    except ArithmeticError:
        logger.exception("Arithmetic fault pricing %s", catalog.vertical)
        raise HTTPException(
            status_code=422, detail="The quote could not be computed"
        ) from None

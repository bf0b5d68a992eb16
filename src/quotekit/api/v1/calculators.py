"""Calculator instance, embed and lead endpoints."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...core.config import Settings
from ...models.calculator import (
    CalculatorInstance,
    CalculatorInstanceCreate,
    CalculatorInstanceUpdate,
)
from ...models.lead import Lead, LeadStatus
from ...schemas.calculator import CalculatorResponse, EmbedResponse, LeadStatusUpdate
from ...services.billing_service import BillingService
from ...services.calculator_service import CalculatorService
from ...services.lead_service import LeadService
from ...services.theming import embed_snippet, render_theme_css
from ..dependencies import (
    get_app_settings,
    get_billing_service,
    get_calculator_service,
    get_lead_service,
)

router = APIRouter()


def _calculator_response(
    instance: CalculatorInstance, settings: Settings
) -> CalculatorResponse:
    base_url = settings.public_base_url
    return CalculatorResponse(
        instance=instance,
        embed_url=instance.embed_url(base_url),
        admin_url=instance.admin_url(base_url),
        embed_code=embed_snippet(instance, base_url),
    )


@router.post("/calculators", response_model=CalculatorResponse, status_code=201)
@beartype
async def create_calculator(
    instance_data: CalculatorInstanceCreate,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    billing_service: BillingService = Depends(get_billing_service),
    settings: Settings = Depends(get_app_settings),
) -> CalculatorResponse:
    """Create a calculator from a vertical template for an account."""
    owner = (await billing_service.get_account(instance_data.owner_id)).unwrap()
    if owner is None:
        raise HTTPException(status_code=404, detail="Account not found")

    result = await calculator_service.create_instance(instance_data)

    if result.is_err():
        raise HTTPException(status_code=400, detail=result.err_value)

    return _calculator_response(result.unwrap(), settings)


@router.get("/calculators/{instance_id}", response_model=CalculatorResponse)
@beartype
async def get_calculator(
    instance_id: UUID,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    settings: Settings = Depends(get_app_settings),
) -> CalculatorResponse:
    """Get a calculator instance with its embed code."""
    instance = (await calculator_service.get_instance(instance_id)).unwrap()
    if instance is None:
        raise HTTPException(status_code=404, detail="Calculator not found")

    return _calculator_response(instance, settings)


@router.patch("/calculators/{instance_id}", response_model=CalculatorResponse)
@beartype
async def update_calculator(
    instance_id: UUID,
    update_data: CalculatorInstanceUpdate,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    settings: Settings = Depends(get_app_settings),
) -> CalculatorResponse:
    """Change a calculator's theme, price overrides or active flag."""
    result = await calculator_service.update_instance(instance_id, update_data)

    if result.is_err():
        status_code = 404 if result.err_value == "Calculator not found" else 400
        raise HTTPException(status_code=status_code, detail=result.err_value)

    return _calculator_response(result.unwrap(), settings)


@router.delete("/calculators/{instance_id}", response_model=CalculatorResponse)
@beartype
async def deactivate_calculator(
    instance_id: UUID,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    settings: Settings = Depends(get_app_settings),
) -> CalculatorResponse:
    """Stop serving a calculator's embed."""
    result = await calculator_service.deactivate(instance_id)

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return _calculator_response(result.unwrap(), settings)


@router.get(
    "/accounts/{owner_id}/calculators", response_model=list[CalculatorResponse]
)
@beartype
async def list_account_calculators(
    owner_id: UUID,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    settings: Settings = Depends(get_app_settings),
) -> list[CalculatorResponse]:
    """List an account's calculators."""
    instances = (await calculator_service.list_for_owner(owner_id)).unwrap()
    return [_calculator_response(instance, settings) for instance in instances]


@router.get("/embed/{embed_id}", response_model=EmbedResponse)
@beartype
async def get_embed(
    embed_id: str,
    calculator_service: CalculatorService = Depends(get_calculator_service),
) -> EmbedResponse:
    """Catalog and scoped theme for an embedded calculator."""
    instance = (await calculator_service.get_by_embed_id(embed_id)).unwrap()
    if instance is None:
        raise HTTPException(status_code=404, detail="Calculator not found")

    catalog_result = await calculator_service.effective_catalog(instance)
    if catalog_result.is_err():
        raise HTTPException(status_code=500, detail=catalog_result.err_value)

    return EmbedResponse(
        embed_id=instance.embed_id,
        vertical=instance.vertical,
        catalog=catalog_result.unwrap(),
        theme=instance.theme,
        theme_css=render_theme_css(instance.theme, instance.embed_id),
    )


@router.get("/calculators/{instance_id}/leads", response_model=list[Lead])
@beartype
async def list_calculator_leads(
    instance_id: UUID,
    status: LeadStatus | None = None,
    calculator_service: CalculatorService = Depends(get_calculator_service),
    lead_service: LeadService = Depends(get_lead_service),
) -> list[Lead]:
    """Leads captured by a calculator, newest first."""
    instance = (await calculator_service.get_instance(instance_id)).unwrap()
    if instance is None:
        raise HTTPException(status_code=404, detail="Calculator not found")

    return (
        await lead_service.list_leads(calculator_instance_id=instance_id, status=status)
    ).unwrap()


@router.patch("/leads/{lead_id}", response_model=Lead)
@beartype
async def update_lead_status(
    lead_id: UUID,
    request: LeadStatusUpdate,
    lead_service: LeadService = Depends(get_lead_service),
) -> Lead:
    """Move a lead through the sales pipeline."""
    result = await lead_service.update_status(lead_id, request.status)

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return result.unwrap()

"""Account and subscription endpoints."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...models.account import AccountCreate
from ...schemas.account import AccountResponse, TierChangeRequest
from ...services.billing_service import BillingService
from ..dependencies import get_billing_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
@beartype
async def register_account(
    account_data: AccountCreate,
    billing_service: BillingService = Depends(get_billing_service),
) -> AccountResponse:
    """Register a business account."""
    result = await billing_service.register_account(account_data)

    if result.is_err():
        raise HTTPException(status_code=400, detail=result.err_value)

    return AccountResponse.from_account(result.unwrap())


@router.get("/{account_id}", response_model=AccountResponse)
@beartype
async def get_account(
    account_id: UUID,
    billing_service: BillingService = Depends(get_billing_service),
) -> AccountResponse:
    """Get an account and its quota position."""
    account = (await billing_service.get_account(account_id)).unwrap()
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")

    return AccountResponse.from_account(account)


@router.put("/{account_id}/tier", response_model=AccountResponse)
@beartype
async def change_tier(
    account_id: UUID,
    request: TierChangeRequest,
    billing_service: BillingService = Depends(get_billing_service),
) -> AccountResponse:
    """Change an account's subscription tier."""
    result = await billing_service.change_tier(account_id, request.tier)

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return AccountResponse.from_account(result.unwrap())

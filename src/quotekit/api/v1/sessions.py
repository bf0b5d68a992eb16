"""Quote session endpoints used by embedded calculators."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...schemas.quote import (
    PrefillRequest,
    SessionStartRequest,
    SessionUpdateRequest,
    SubmitRequest,
)
from ...services.calculator_service import CalculatorService
from ...services.quote_session import QuoteSession, QuoteSessionService, QuoteSubmission
from ..dependencies import get_calculator_service, get_session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=QuoteSession, status_code=201)
@beartype
async def start_session(
    request: SessionStartRequest,
    session_service: QuoteSessionService = Depends(get_session_service),
    calculator_service: CalculatorService = Depends(get_calculator_service),
) -> QuoteSession:
    """Start a new quote session."""
    calculator_instance_id = None
    if request.embed_id is not None:
        instance = (await calculator_service.get_by_embed_id(request.embed_id)).unwrap()
        if instance is None:
            raise HTTPException(status_code=404, detail="Calculator not found")
        calculator_instance_id = instance.id

    result = await session_service.start_session(
        vertical=request.vertical, calculator_instance_id=calculator_instance_id
    )

    if result.is_err():
        raise HTTPException(status_code=404, detail=result.err_value)

    return result.unwrap()


@router.get("/{session_id}", response_model=QuoteSession)
@beartype
async def get_session(
    session_id: UUID,
    session_service: QuoteSessionService = Depends(get_session_service),
) -> QuoteSession:
    """Get session state with its live preview."""
    result = await session_service.get_session(session_id)

    if result.is_err():
        raise HTTPException(status_code=500, detail=result.err_value)

    session = result.unwrap()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found or expired")

    return session


@router.patch("/{session_id}", response_model=QuoteSession)
@beartype
async def update_session(
    session_id: UUID,
    request: SessionUpdateRequest,
    session_service: QuoteSessionService = Depends(get_session_service),
) -> QuoteSession:
    """Change field values or the promo code."""
    result = await session_service.update_fields(
        session_id,
        request.field_values,
        promo_code=request.promo_code,
        clear=request.clear,
    )

    if result.is_err():
        raise HTTPException(status_code=400, detail=result.err_value)

    return result.unwrap()


@router.post("/{session_id}/prefill", response_model=QuoteSession)
@beartype
async def prefill_session(
    session_id: UUID,
    request: PrefillRequest,
    session_service: QuoteSessionService = Depends(get_session_service),
) -> QuoteSession:
    """Fill fields from a free-text description of the job."""
    result = await session_service.prefill(session_id, request.free_text)

    if result.is_err():
        raise HTTPException(status_code=400, detail=result.err_value)

    return result.unwrap()


@router.post("/{session_id}/submit", response_model=QuoteSubmission)
@beartype
async def submit_session(
    session_id: UUID,
    request: SubmitRequest,
    session_service: QuoteSessionService = Depends(get_session_service),
) -> QuoteSubmission:
    """Lock the quote and create the lead.

    Submitting again returns the same lead.
    """
    result = await session_service.submit(session_id, request.contact)

    if result.is_err():
        raise HTTPException(status_code=422, detail=result.err_value)

    return result.unwrap()

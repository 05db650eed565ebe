"""
Seat hold endpoints: acquire, validate-then-hold, release, check.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.api.deps import get_hold_manager
from reservation_core.core.security import get_current_claimant_id
from reservation_core.db.session import get_db
from reservation_core.schemas.hold import (
    ClaimantHoldsResponse,
    HoldCheckResponse,
    HoldRequest,
    HoldResponse,
    ReleaseResponse,
    SeatHoldResponse,
)
from reservation_core.services.hold_service import HoldManager
from reservation_core.services.seat_service import list_show_seats

router = APIRouter(prefix="/holds", tags=["Holds"])


def _hold_response(message: str, holds: HoldManager, acquired) -> HoldResponse:
    return HoldResponse(
        message=message,
        ttl=holds.ttl,
        data=[SeatHoldResponse(seat_label=h.seat_label, action=h.action.value) for h in acquired],
    )


@router.post("/", response_model=HoldResponse)
async def hold_seats(
    payload: HoldRequest,
    claimant_id: str = Depends(get_current_claimant_id),
    holds: HoldManager = Depends(get_hold_manager),
):
    """
    Hold seats for the caller, or refresh holds they already own.
    Returns 409 naming the first seat held by someone else.
    """
    acquired = await holds.acquire_holds(payload.show_id, payload.seats, claimant_id)
    return _hold_response("Seats held", holds, acquired)


@router.post("/validate", response_model=HoldResponse)
async def validate_then_hold(
    payload: HoldRequest,
    claimant_id: str = Depends(get_current_claimant_id),
    db: AsyncSession = Depends(get_db),
    holds: HoldManager = Depends(get_hold_manager),
):
    """Check the ledger for every seat, then hold them all."""
    acquired = await holds.validate_then_hold(db, payload.show_id, payload.seats, claimant_id)
    return _hold_response("Validated and held", holds, acquired)


@router.post("/release", response_model=ReleaseResponse)
async def release_holds(
    payload: HoldRequest,
    claimant_id: str = Depends(get_current_claimant_id),
    holds: HoldManager = Depends(get_hold_manager),
):
    """Release the caller's holds. Always succeeds."""
    released = await holds.release_holds(payload.show_id, payload.seats, claimant_id)
    return ReleaseResponse(message="Holds released", released=released)


@router.post("/check", response_model=HoldCheckResponse)
async def check_holds(
    payload: HoldRequest,
    claimant_id: str = Depends(get_current_claimant_id),
    holds: HoldManager = Depends(get_hold_manager),
):
    """Confirm the caller still holds every seat; 409 lists the ones they lost."""
    await holds.ensure_held(payload.show_id, payload.seats, claimant_id)
    return HoldCheckResponse(ok=True)


@router.get("/me/{show_id}", response_model=ClaimantHoldsResponse)
async def my_holds(
    show_id: int,
    claimant_id: str = Depends(get_current_claimant_id),
    db: AsyncSession = Depends(get_db),
    holds: HoldManager = Depends(get_hold_manager),
):
    """Seats of a show currently held by the caller."""
    seats = await list_show_seats(db, show_id)
    owners = await holds.holders(show_id, [seat.seat_label for seat in seats])
    mine = [label for label, owner in owners.items() if owner == claimant_id]
    return ClaimantHoldsResponse(show_id=show_id, total=len(mine), seats=mine)

"""
Seat ledger endpoints: provisioning and the live seat map.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.api.deps import get_hold_manager
from reservation_core.core.security import get_current_claimant_id, require_admin
from reservation_core.db.session import get_db
from reservation_core.models.seat import SeatStatus
from reservation_core.schemas.seat import SeatMapResponse, SeatView, ShowSeatsCreate, ShowSeatsCreated
from reservation_core.services.hold_service import HoldManager
from reservation_core.services.seat_service import create_show_seats, list_show_seats

router = APIRouter(prefix="/show-seats", tags=["Seats"])


@router.post("/", response_model=ShowSeatsCreated, status_code=status.HTTP_201_CREATED)
async def provision_seats(
    payload: ShowSeatsCreate,
    admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Add seats to a show. Existing seats are left as they are."""
    created = await create_show_seats(db, payload.show_id, payload.seats)
    return ShowSeatsCreated(show_id=payload.show_id, requested=len(payload.seats), created=created)


@router.get("/{show_id}", response_model=SeatMapResponse)
async def seat_map(
    show_id: int,
    claimant_id: str = Depends(get_current_claimant_id),
    db: AsyncSession = Depends(get_db),
    holds: HoldManager = Depends(get_hold_manager),
):
    """
    Seat map for a show. Available seats with a live hold are reported as
    "held"; the ledger itself only ever knows available, booked, blocked.
    """
    seats = await list_show_seats(db, show_id)
    owners = await holds.holders(show_id, [seat.seat_label for seat in seats])

    views = []
    for seat in seats:
        owner = owners[seat.seat_label]
        seat_status = seat.seat_status
        if seat_status is SeatStatus.AVAILABLE:
            shown = "held" if owner is not None else "available"
        elif seat_status is SeatStatus.BOOKED:
            shown = "booked"
        elif seat_status is SeatStatus.BLOCKED:
            shown = "blocked"
        else:
            raise ValueError(f"Unhandled seat status {seat_status!r}")
        views.append(SeatView(
            seat_label=seat.seat_label,
            status=shown,
            held_by_me=shown == "held" and owner == claimant_id,
        ))

    return SeatMapResponse(show_id=show_id, count=len(views), seats=views)

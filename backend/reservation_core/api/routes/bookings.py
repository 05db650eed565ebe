"""
Booking read endpoints: history, single booking, admin listing, analytics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.core.security import get_token_payload, is_admin, require_admin
from reservation_core.db.session import get_db
from reservation_core.schemas.booking import BookingAnalyticsResponse, BookingResponse
from reservation_core.services.analytics_service import get_booking_analytics
from reservation_core.services.booking_service import get_all_bookings, get_booking, get_claimant_bookings

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/", response_model=list[BookingResponse])
async def list_my_bookings(
    token: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings for the authenticated claimant."""
    bookings = await get_claimant_bookings(db, str(token["sub"]))
    return [BookingResponse.model_validate(b) for b in bookings]


# Declared before /{booking_id} so "all" and "analytics" are not parsed as ids
@router.get("/all", response_model=list[BookingResponse])
async def list_all_bookings(
    admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Every booking, newest first. Admin only."""
    bookings = await get_all_bookings(db)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/analytics", response_model=BookingAnalyticsResponse)
async def booking_analytics(
    admin_id: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Revenue and seat counts. Admin only."""
    return await get_booking_analytics(db)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: int,
    token: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
):
    """Get one booking (owner or admin)."""
    booking = await get_booking(db, booking_id, str(token["sub"]), is_admin=is_admin(token))
    return BookingResponse.model_validate(booking)

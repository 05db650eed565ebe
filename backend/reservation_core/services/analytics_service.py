"""
Read-only booking analytics over the ledger.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.models.booking import Booking, BookingSeat, BookingStatus
from reservation_core.models.seat import SeatStatus, ShowSeat

TOP_SHOWS_LIMIT = 10
REVENUE_WINDOW_DAYS = 30


async def get_booking_analytics(db: AsyncSession) -> dict:
    confirmed = Booking.status == BookingStatus.CONFIRMED.value

    revenue = (
        await db.execute(select(func.coalesce(func.sum(Booking.total_amount), 0)).where(confirmed))
    ).scalar()
    bookings = (await db.execute(select(func.count(Booking.id)))).scalar()
    seats_sold = (await db.execute(select(func.count(BookingSeat.id)))).scalar()
    seats_available = (
        await db.execute(
            select(func.count()).select_from(ShowSeat).where(ShowSeat.status == SeatStatus.AVAILABLE.value)
        )
    ).scalar()

    show_revenue = func.coalesce(func.sum(Booking.total_amount), 0).label("revenue")
    by_show = await db.execute(
        select(Booking.show_id, show_revenue, func.count(Booking.id).label("bookings"))
        .where(confirmed)
        .group_by(Booking.show_id)
        .order_by(show_revenue.desc())
        .limit(TOP_SHOWS_LIMIT)
    )

    since = datetime.now(timezone.utc) - timedelta(days=REVENUE_WINDOW_DAYS)
    day = func.date(Booking.booked_at).label("day")
    by_day = await db.execute(
        select(
            day,
            func.coalesce(func.sum(Booking.total_amount), 0).label("revenue"),
            func.count(Booking.id).label("bookings"),
        )
        .where(confirmed, Booking.booked_at >= since)
        .group_by(day)
        .order_by(day)
    )

    return {
        "totals": {
            "revenue": revenue,
            "bookings": bookings,
        },
        "seats": {
            "sold": seats_sold,
            "available": seats_available,
        },
        "revenue_by_show": [
            {"show_id": row.show_id, "revenue": row.revenue, "bookings": row.bookings}
            for row in by_show
        ],
        "revenue_by_day": [
            {"day": row.day, "revenue": row.revenue, "bookings": row.bookings}
            for row in by_day
        ],
    }

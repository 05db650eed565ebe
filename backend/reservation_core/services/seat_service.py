"""
Seat ledger reads and provisioning.

The ledger is the only source of truth for "has this seat been sold".
Nothing here writes BOOKED; that is the booking finalizer's conditional
update.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.core.errors import (
    SeatBlockedError,
    SeatBookedError,
    SeatNotFoundError,
    ShowNotFoundError,
)
from reservation_core.core.logging import get_logger
from reservation_core.core.seats import normalize_labels
from reservation_core.models.seat import SeatStatus, ShowSeat

logger = get_logger(__name__)


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Seat provisioning not supported on {dialect}")
    return insert


async def create_show_seats(db: AsyncSession, show_id: int, raw_labels: list[str]) -> int:
    """
    Provision seats for a show. Labels are normalized; seats that already
    exist are left untouched. Returns the number of seats inserted.
    """
    labels = normalize_labels(raw_labels)
    insert = _insert_for(db)
    stmt = (
        insert(ShowSeat)
        .values([
            {"show_id": show_id, "seat_label": label, "status": SeatStatus.AVAILABLE.value}
            for label in labels
        ])
        .on_conflict_do_nothing(index_elements=["show_id", "seat_label"])
    )
    result = await db.execute(stmt)
    created = max(result.rowcount or 0, 0)
    logger.info("show_seats_created", show_id=show_id, requested=len(labels), created=created)
    return created


async def list_show_seats(db: AsyncSession, show_id: int) -> list[ShowSeat]:
    result = await db.execute(
        select(ShowSeat)
        .where(ShowSeat.show_id == show_id)
        .order_by(ShowSeat.seat_label)
    )
    seats = list(result.scalars().all())
    if not seats:
        raise ShowNotFoundError(show_id)
    return seats


async def get_seat_statuses(
    db: AsyncSession,
    show_id: int,
    labels: list[str],
) -> dict[str, SeatStatus]:
    """Ledger status for each requested label; unknown labels are absent from the result."""
    result = await db.execute(
        select(ShowSeat.seat_label, ShowSeat.status).where(
            ShowSeat.show_id == show_id,
            ShowSeat.seat_label.in_(labels),
        )
    )
    return {label: SeatStatus(status) for label, status in result.all()}


async def ensure_sellable(db: AsyncSession, show_id: int, labels: list[str]) -> None:
    """
    Fail on the first seat that cannot be sold, checking in this order:
    existence, then booked, then blocked. Labels must already be normalized.
    """
    statuses = await get_seat_statuses(db, show_id, labels)

    for label in labels:
        if label not in statuses:
            raise SeatNotFoundError(label, show_id)

    for label in labels:
        if statuses[label] is SeatStatus.BOOKED:
            raise SeatBookedError(label)

    for label in labels:
        if statuses[label] is SeatStatus.BLOCKED:
            raise SeatBlockedError(label)

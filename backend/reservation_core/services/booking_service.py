"""
Booking finalizer: turns a paid checkout session into durably booked seats.

CONCURRENCY STRATEGY: Hold recheck + conditional UPDATE in one transaction
=========================================================================

Problem:
  A session proves the caller held its seats when it was opened, not now.
  Holds can lapse while the user sits on the payment page, and a seat can
  be sold through another path at any moment up to the commit.

Solution:
  1. Load the session (gone -> expired, other owner -> forbidden)
  2. Re-check every hold in the store (lapsed -> "seat no longer held")
  3. In one transaction:
       INSERT the booking
       UPDATE show_seats SET status = 'booked'
       WHERE show_id = :show AND seat_label = :seat AND status = 'available'
     for each seat; rowcount 0 means someone else sold it, so the whole
     transaction is rolled back and the seat is named in the conflict
  4. After COMMIT, release the holds and drop the session

  The conditional UPDATE is the real guarantee: two confirms racing on
  the same seat cannot both see rowcount 1. The unique constraint on
  booking_seats (show_id, seat_label) is the final safety net.

  Cleanup in step 4 is best-effort. A hold left behind is inert (the seat
  is already booked) and expires by TTL. On failure nothing is cleaned
  up: holds and session stay until the caller cancels or they expire.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.core.errors import (
    BookingNotFoundError,
    ConflictError,
    ForbiddenError,
    InfrastructureError,
    LedgerUnavailableError,
    SeatBookedError,
    SessionExpiredError,
)
from reservation_core.core.logging import get_logger
from reservation_core.core.metrics import booking_latency, record_booking_attempt
from reservation_core.models.booking import Booking, BookingSeat, BookingStatus
from reservation_core.models.seat import SeatStatus, ShowSeat
from reservation_core.services.checkout_service import CheckoutSessions

logger = get_logger(__name__)


async def confirm_booking(
    db: AsyncSession,
    sessions: CheckoutSessions,
    session_id: str,
    claimant_id: str,
    payment_reference: Optional[str] = None,
) -> Booking:
    """
    Finalize a checkout session whose payment the payment provider has
    already verified. Either every seat in the session is booked or none is.
    """
    start = time.perf_counter()

    snapshot = await sessions.load(session_id)
    if snapshot is None:
        record_booking_attempt("conflict")
        logger.info("booking_session_expired", session_id=session_id)
        raise SessionExpiredError()
    if snapshot.claimant_id != claimant_id:
        record_booking_attempt("error")
        logger.warning("booking_session_forbidden", session_id=session_id)
        raise ForbiddenError()

    show_id = snapshot.show_id
    labels = snapshot.seat_labels

    try:
        await sessions.holds.ensure_held(show_id, labels, claimant_id)
    except ConflictError:
        record_booking_attempt("conflict")
        raise

    booking = Booking(
        claimant_id=claimant_id,
        show_id=show_id,
        total_amount=snapshot.amount,
        status=BookingStatus.CONFIRMED.value,
        payment_reference=payment_reference or f"dummy_{session_id}",
        booked_at=datetime.now(timezone.utc),
        seats=[],
    )

    try:
        db.add(booking)
        await db.flush()

        for label in labels:
            result = await db.execute(
                update(ShowSeat)
                .where(
                    ShowSeat.show_id == show_id,
                    ShowSeat.seat_label == label,
                    ShowSeat.status == SeatStatus.AVAILABLE.value,
                )
                .values(status=SeatStatus.BOOKED.value)
            )
            if result.rowcount == 0:
                raise SeatBookedError(label)

            booking.seats.append(BookingSeat(show_id=show_id, seat_label=label))
            try:
                await db.flush()
            except IntegrityError as e:
                raise SeatBookedError(label) from e

        await db.commit()

    except SeatBookedError as e:
        await db.rollback()
        record_booking_attempt("conflict")
        logger.warning(
            "booking_conflict",
            session_id=session_id,
            show_id=show_id,
            seat=e.seat_label,
            reason="seat_already_booked",
        )
        raise
    except DBAPIError as e:
        await db.rollback()
        record_booking_attempt("error")
        logger.error("booking_ledger_error", session_id=session_id, error=str(e))
        raise LedgerUnavailableError("confirm") from e

    await _cleanup_after_commit(sessions, session_id, show_id, labels, claimant_id)

    booking_latency.observe(time.perf_counter() - start)
    record_booking_attempt("success")
    logger.info(
        "booking_confirmed",
        booking_id=booking.id,
        session_id=session_id,
        show_id=show_id,
        seats=labels,
        amount=str(booking.total_amount),
    )
    return booking


async def _cleanup_after_commit(
    sessions: CheckoutSessions,
    session_id: str,
    show_id: int,
    labels: list[str],
    claimant_id: str,
) -> None:
    # The booking is durable at this point; nothing here may fail the request.
    try:
        await sessions.holds.release_holds(show_id, labels, claimant_id)
    except InfrastructureError as e:
        logger.warning("hold_cleanup_failed", show_id=show_id, seats=labels, error=str(e))
    try:
        await sessions.discard(session_id)
    except InfrastructureError as e:
        logger.warning("session_cleanup_failed", session_id=session_id, error=str(e))


async def get_claimant_bookings(db: AsyncSession, claimant_id: str) -> list[Booking]:
    """Get all bookings for a claimant, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.claimant_id == claimant_id)
        .order_by(Booking.booked_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_all_bookings(db: AsyncSession) -> list[Booking]:
    """Every booking across claimants, newest first. Admin reads only."""
    result = await db.execute(select(Booking).order_by(Booking.booked_at.desc(), Booking.id.desc()))
    return list(result.scalars().all())


async def get_booking(
    db: AsyncSession,
    booking_id: int,
    claimant_id: str,
    is_admin: bool = False,
) -> Booking:
    """Get one booking. Only its owner or an admin may read it."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if not booking:
        raise BookingNotFoundError(booking_id)
    if booking.claimant_id != claimant_id and not is_admin:
        raise ForbiddenError()
    return booking

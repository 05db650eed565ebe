"""
Tests for the booking finalizer, including concurrency and rollback scenarios.
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from conftest import SHOW_A, set_seat_status
from reservation_core.core.errors import (
    ForbiddenError,
    ReservationError,
    SeatBookedError,
    SeatNotHeldError,
    SessionExpiredError,
    StoreUnavailableError,
)
from reservation_core.core.seats import hold_key, session_key
from reservation_core.models.booking import Booking, BookingSeat
from reservation_core.models.seat import SeatStatus, ShowSeat
from reservation_core.services.booking_service import (
    confirm_booking,
    get_booking,
    get_claimant_bookings,
)


async def ledger_statuses(session_factory, show_id: int) -> dict:
    async with session_factory() as session:
        result = await session.execute(
            select(ShowSeat.seat_label, ShowSeat.status).where(ShowSeat.show_id == show_id)
        )
        return dict(result.all())


async def booking_counts(session_factory) -> tuple[int, int]:
    async with session_factory() as session:
        bookings = (await session.execute(select(func.count(Booking.id)))).scalar()
        seats = (await session.execute(select(func.count(BookingSeat.id)))).scalar()
        return bookings, seats


async def open_session(db_session, holds, sessions, claimant: str, labels: list[str], amount="500"):
    await holds.acquire_holds(SHOW_A, labels, claimant)
    created = await sessions.create_session(db_session, claimant, SHOW_A, labels, Decimal(amount))
    return created.session_id


@pytest.mark.asyncio
async def test_confirm_books_seats_and_cleans_up(seeded, db_session, session_factory, holds, sessions, store):
    """Scenario A: hold, session, confirm."""
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1", "A2"])

    booking = await confirm_booking(db_session, sessions, session_id, "user-x")

    assert booking.id is not None
    assert booking.status == "confirmed"
    assert booking.seat_labels == ["A1", "A2"]
    assert booking.total_amount == Decimal("500")
    assert booking.payment_reference == f"dummy_{session_id}"

    statuses = await ledger_statuses(session_factory, SHOW_A)
    assert statuses == {"A1": "booked", "A2": "booked", "A3": "available"}
    assert await store.get(hold_key(SHOW_A, "A1")) is None
    assert await store.get(hold_key(SHOW_A, "A2")) is None
    assert await store.get(session_key(session_id)) is None


@pytest.mark.asyncio
async def test_cleanup_failure_after_commit_keeps_booking(
    seeded, db_session, session_factory, holds, sessions, store, monkeypatch
):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])

    async def store_down(*args, **kwargs):
        raise StoreUnavailableError("delete")

    monkeypatch.setattr(holds, "release_holds", store_down)
    monkeypatch.setattr(sessions, "discard", store_down)

    booking = await confirm_booking(db_session, sessions, session_id, "user-x")

    assert booking.seat_labels == ["A1"]
    assert (await ledger_statuses(session_factory, SHOW_A))["A1"] == "booked"
    assert await booking_counts(session_factory) == (1, 1)
    # Left behind for the TTL to clear
    assert await store.get(hold_key(SHOW_A, "A1")) == "user-x"
    assert await store.get(session_key(session_id)) is not None


@pytest.mark.asyncio
async def test_confirm_records_payment_reference(seeded, db_session, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A3"], amount="120.50")

    booking = await confirm_booking(db_session, sessions, session_id, "user-x", payment_reference="pi_123")

    assert booking.payment_reference == "pi_123"
    assert booking.total_amount == Decimal("120.50")


@pytest.mark.asyncio
async def test_confirm_fails_when_seat_sold_elsewhere(seeded, db_session, session_factory, holds, sessions):
    """Scenario B: A1 is marked booked directly after the session was opened."""
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])
    await set_seat_status(session_factory, SHOW_A, "A1", SeatStatus.BOOKED)

    with pytest.raises(SeatBookedError) as exc_info:
        await confirm_booking(db_session, sessions, session_id, "user-x")

    assert exc_info.value.seat_label == "A1"
    assert await booking_counts(session_factory) == (0, 0)

    # The session can never produce a booking for the sold seat
    with pytest.raises(SeatBookedError):
        await confirm_booking(db_session, sessions, session_id, "user-x")
    assert await booking_counts(session_factory) == (0, 0)


@pytest.mark.asyncio
async def test_partial_conflict_rolls_back_every_seat(seeded, db_session, session_factory, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1", "A2", "A3"])
    await set_seat_status(session_factory, SHOW_A, "A2", SeatStatus.BOOKED)

    with pytest.raises(SeatBookedError) as exc_info:
        await confirm_booking(db_session, sessions, session_id, "user-x")

    assert exc_info.value.seat_label == "A2"
    assert await booking_counts(session_factory) == (0, 0)
    statuses = await ledger_statuses(session_factory, SHOW_A)
    # A1 was flipped inside the failed transaction and must be back to available
    assert statuses == {"A1": "available", "A2": "booked", "A3": "available"}


@pytest.mark.asyncio
async def test_failed_confirm_leaves_holds_to_expire(seeded, db_session, session_factory, holds, sessions, store):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1", "A2"])
    await set_seat_status(session_factory, SHOW_A, "A2", SeatStatus.BOOKED)

    with pytest.raises(SeatBookedError):
        await confirm_booking(db_session, sessions, session_id, "user-x")

    assert await store.get(hold_key(SHOW_A, "A1")) == "user-x"
    assert await store.get(session_key(session_id)) is not None


@pytest.mark.asyncio
async def test_confirm_rechecks_holds(seeded, db_session, session_factory, holds, sessions, store):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1", "A2"])
    # X's hold on A2 lapses and Y takes it while X is still paying
    await store.delete(hold_key(SHOW_A, "A2"))
    await holds.acquire_holds(SHOW_A, ["A2"], "user-y")

    with pytest.raises(SeatNotHeldError) as exc_info:
        await confirm_booking(db_session, sessions, session_id, "user-x")

    assert exc_info.value.seat_label == "A2"
    assert await booking_counts(session_factory) == (0, 0)
    assert (await ledger_statuses(session_factory, SHOW_A))["A1"] == "available"


@pytest.mark.asyncio
async def test_confirm_after_expiry(seeded, db_session, holds, sessions, clock):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])
    clock.advance(301)

    with pytest.raises(SessionExpiredError) as exc_info:
        await confirm_booking(db_session, sessions, session_id, "user-x")
    assert exc_info.value.status_code == 410


@pytest.mark.asyncio
async def test_confirm_by_other_claimant_is_forbidden(seeded, db_session, session_factory, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])

    with pytest.raises(ForbiddenError):
        await confirm_booking(db_session, sessions, session_id, "user-y")
    assert await booking_counts(session_factory) == (0, 0)


@pytest.mark.asyncio
async def test_session_is_consumed_by_confirm(seeded, db_session, session_factory, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])
    await confirm_booking(db_session, sessions, session_id, "user-x")

    with pytest.raises(SessionExpiredError):
        await confirm_booking(db_session, sessions, session_id, "user-x")
    assert await booking_counts(session_factory) == (1, 1)


@pytest.mark.asyncio
async def test_cancelled_session_cannot_be_confirmed(seeded, db_session, session_factory, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])
    await sessions.cancel_session(session_id, "user-x")

    with pytest.raises(SessionExpiredError):
        await confirm_booking(db_session, sessions, session_id, "user-x")
    assert await booking_counts(session_factory) == (0, 0)


@pytest.mark.asyncio
async def test_racing_confirms_book_each_seat_once(seeded, db_session, session_factory, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1", "A2"])

    async def attempt():
        async with session_factory() as session:
            return await confirm_booking(session, sessions, session_id, "user-x")

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    successes = [r for r in results if isinstance(r, Booking)]
    failures = [r for r in results if isinstance(r, ReservationError)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert await booking_counts(session_factory) == (1, 2)


@pytest.mark.asyncio
async def test_booking_history_and_access(seeded, db_session, holds, sessions):
    session_id = await open_session(db_session, holds, sessions, "user-x", ["A1"])
    booking = await confirm_booking(db_session, sessions, session_id, "user-x")

    history = await get_claimant_bookings(db_session, "user-x")
    assert [b.id for b in history] == [booking.id]
    assert await get_claimant_bookings(db_session, "user-y") == []

    assert (await get_booking(db_session, booking.id, "user-x")).id == booking.id
    assert (await get_booking(db_session, booking.id, "admin-1", is_admin=True)).id == booking.id
    with pytest.raises(ForbiddenError):
        await get_booking(db_session, booking.id, "user-y")

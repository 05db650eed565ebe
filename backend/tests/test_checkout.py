"""
Tests for checkout sessions: creation preconditions, reads, cancel, expiry.
"""

from decimal import Decimal

import pytest

from conftest import SHOW_A, set_seat_status
from reservation_core.core.errors import (
    ForbiddenError,
    SeatBlockedError,
    SeatBookedError,
    SeatNotFoundError,
    SeatNotHeldError,
    SessionNotFoundError,
)
from reservation_core.core.seats import hold_key, session_key
from reservation_core.models.seat import SeatStatus


@pytest.mark.asyncio
async def test_create_session_for_held_seats(seeded, db_session, holds, sessions, store):
    await holds.acquire_holds(SHOW_A, ["A1", "A2"], "user-x")

    session = await sessions.create_session(db_session, "user-x", SHOW_A, ["a2", "a1"], Decimal("500"))

    assert session.session_id.startswith("pay_")
    assert session.ttl == 300
    assert session.snapshot.seat_labels == ["A1", "A2"]
    assert session.snapshot.amount == Decimal("500")
    assert await store.ttl(session_key(session.session_id)) == 300


@pytest.mark.asyncio
async def test_session_ids_are_unique(seeded, db_session, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    first = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("100"))
    second = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("100"))
    assert first.session_id != second.session_id


@pytest.mark.asyncio
async def test_create_session_requires_existing_hold(seeded, db_session, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")

    with pytest.raises(SeatNotHeldError) as exc_info:
        await sessions.create_session(db_session, "user-x", SHOW_A, ["A1", "A2"], Decimal("500"))
    assert exc_info.value.seat_label == "A2"


@pytest.mark.asyncio
async def test_create_session_rejects_seat_held_by_other(seeded, db_session, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-y")

    with pytest.raises(SeatNotHeldError) as exc_info:
        await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("250"))
    assert exc_info.value.seat_label == "A1"


@pytest.mark.asyncio
async def test_create_session_checks_ledger_before_holds(seeded, db_session, session_factory, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    await set_seat_status(session_factory, SHOW_A, "A1", SeatStatus.BOOKED)
    await set_seat_status(session_factory, SHOW_A, "A2", SeatStatus.BLOCKED)

    # Unknown seat wins over booked, booked over blocked, blocked over unheld
    with pytest.raises(SeatNotFoundError):
        await sessions.create_session(db_session, "user-x", SHOW_A, ["A1", "A2", "Q1"], Decimal("1"))
    with pytest.raises(SeatBookedError) as booked:
        await sessions.create_session(db_session, "user-x", SHOW_A, ["A2", "A1"], Decimal("1"))
    assert booked.value.seat_label == "A1"
    with pytest.raises(SeatBlockedError) as blocked:
        await sessions.create_session(db_session, "user-x", SHOW_A, ["A2", "A3"], Decimal("1"))
    assert blocked.value.seat_label == "A2"


@pytest.mark.asyncio
async def test_read_session_reports_live_ttl(seeded, db_session, holds, sessions, clock):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))

    clock.advance(100)
    session = await sessions.get_session(created.session_id, "user-x")

    assert session.ttl == 200
    assert session.snapshot.claimant_id == "user-x"
    assert session.snapshot.seat_labels == ["A1"]


@pytest.mark.asyncio
async def test_read_session_of_other_claimant_is_forbidden(seeded, db_session, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))

    with pytest.raises(ForbiddenError) as exc_info:
        await sessions.get_session(created.session_id, "user-y")
    assert "user-x" not in exc_info.value.message


@pytest.mark.asyncio
async def test_expired_and_unknown_sessions_look_the_same(seeded, db_session, holds, sessions, clock):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))
    clock.advance(301)

    with pytest.raises(SessionNotFoundError) as expired:
        await sessions.get_session(created.session_id, "user-x")
    with pytest.raises(SessionNotFoundError) as unknown:
        await sessions.get_session("pay_does_not_exist", "user-x")
    assert expired.value.message == unknown.value.message


@pytest.mark.asyncio
async def test_cancel_releases_holds_and_deletes_session(seeded, db_session, holds, sessions, store):
    await holds.acquire_holds(SHOW_A, ["A1", "A2"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1", "A2"], Decimal("500"))

    assert await sessions.cancel_session(created.session_id, "user-x") is True

    assert await store.get(session_key(created.session_id)) is None
    assert await store.get(hold_key(SHOW_A, "A1")) is None
    assert await store.get(hold_key(SHOW_A, "A2")) is None
    # Another claimant can now take the seats
    await holds.acquire_holds(SHOW_A, ["A1", "A2"], "user-y")


@pytest.mark.asyncio
async def test_cancel_is_idempotent(seeded, db_session, holds, sessions):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))

    assert await sessions.cancel_session(created.session_id, "user-x") is True
    assert await sessions.cancel_session(created.session_id, "user-x") is False
    assert await sessions.cancel_session("pay_never_existed", "user-x") is False


@pytest.mark.asyncio
async def test_cancel_does_not_touch_holds_taken_by_others(seeded, db_session, holds, sessions, store):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))
    # X's hold disappears and Y grabs the seat while the session is still open
    await store.delete(hold_key(SHOW_A, "A1"))
    await holds.acquire_holds(SHOW_A, ["A1"], "user-y")

    await sessions.cancel_session(created.session_id, "user-x")

    assert await store.get(hold_key(SHOW_A, "A1")) == "user-y"


@pytest.mark.asyncio
async def test_cancel_by_other_claimant_is_forbidden(seeded, db_session, holds, sessions, store):
    await holds.acquire_holds(SHOW_A, ["A1"], "user-x")
    created = await sessions.create_session(db_session, "user-x", SHOW_A, ["A1"], Decimal("150"))

    with pytest.raises(ForbiddenError):
        await sessions.cancel_session(created.session_id, "user-y")
    assert await store.get(hold_key(SHOW_A, "A1")) == "user-x"

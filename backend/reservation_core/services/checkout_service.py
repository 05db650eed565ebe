"""
Checkout session coordinator.

A session is a snapshot of "this claimant intends to pay this amount for
these seats", stored under pay:session:<id> with an absolute TTL. It owns
no seats: the holds do. Sessions are only opened when every seat is
sellable in the ledger and already held by the caller, and they end in
exactly one of three ways: confirmed, cancelled, or expired by TTL.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.core.config import get_settings
from reservation_core.core.errors import ForbiddenError, ReservationError, SessionNotFoundError
from reservation_core.core.logging import get_logger
from reservation_core.core.metrics import record_session_operation
from reservation_core.core.seats import normalize_labels, session_key
from reservation_core.infrastructure.store import KeyValueStore
from reservation_core.schemas.checkout import CheckoutSessionSnapshot
from reservation_core.services.hold_service import HoldManager
from reservation_core.services.seat_service import ensure_sellable

logger = get_logger(__name__)


def new_session_id() -> str:
    return f"pay_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    snapshot: CheckoutSessionSnapshot
    ttl: int


class CheckoutSessions:
    def __init__(
        self,
        store: KeyValueStore,
        holds: HoldManager,
        ttl_seconds: Optional[int] = None,
    ):
        self.store = store
        self.holds = holds
        self.ttl = ttl_seconds or get_settings().SESSION_TTL_SECONDS

    async def create_session(
        self,
        db: AsyncSession,
        claimant_id: str,
        show_id: int,
        seat_labels: Iterable[str],
        amount: Decimal,
    ) -> CheckoutSession:
        """
        Open a payment session. Preconditions are checked in order and the
        first violation is raised: seat exists, not booked, not blocked,
        held by this claimant.
        """
        labels = normalize_labels(seat_labels)
        try:
            await ensure_sellable(db, show_id, labels)
            await self.holds.ensure_held(show_id, labels, claimant_id)
        except ReservationError:
            record_session_operation("create", ok=False)
            raise

        session_id = new_session_id()
        snapshot = CheckoutSessionSnapshot(
            claimant_id=claimant_id,
            show_id=show_id,
            seat_labels=labels,
            amount=amount,
            created_at=datetime.now(timezone.utc),
        )
        await self.store.set(session_key(session_id), snapshot.model_dump_json(), self.ttl)

        record_session_operation("create", ok=True)
        logger.info(
            "session_created",
            session_id=session_id,
            show_id=show_id,
            seats=labels,
            amount=str(amount),
            ttl=self.ttl,
        )
        return CheckoutSession(session_id=session_id, snapshot=snapshot, ttl=self.ttl)

    async def load(self, session_id: str) -> Optional[CheckoutSessionSnapshot]:
        """Raw lookup; None when the session expired or never existed."""
        raw = await self.store.get(session_key(session_id))
        if raw is None:
            return None
        return CheckoutSessionSnapshot.model_validate_json(raw)

    async def get_session(self, session_id: str, claimant_id: str) -> CheckoutSession:
        """Snapshot plus the live remaining TTL, for a countdown in the client."""
        snapshot = await self.load(session_id)
        if snapshot is None:
            record_session_operation("read", ok=False)
            raise SessionNotFoundError()
        if snapshot.claimant_id != claimant_id:
            record_session_operation("read", ok=False)
            logger.warning("session_access_denied", session_id=session_id)
            raise ForbiddenError()

        ttl = await self.store.ttl(session_key(session_id))
        record_session_operation("read", ok=True)
        return CheckoutSession(session_id=session_id, snapshot=snapshot, ttl=max(ttl, 0))

    async def cancel_session(self, session_id: str, claimant_id: str) -> bool:
        """
        Release the session's holds and drop the session. A session that is
        already gone is a successful no-op; returns whether anything was cancelled.
        """
        snapshot = await self.load(session_id)
        if snapshot is None:
            record_session_operation("cancel", ok=True)
            logger.info("session_cancel_noop", session_id=session_id)
            return False
        if snapshot.claimant_id != claimant_id:
            record_session_operation("cancel", ok=False)
            logger.warning("session_access_denied", session_id=session_id)
            raise ForbiddenError()

        await self.holds.release_holds(snapshot.show_id, snapshot.seat_labels, claimant_id)
        await self.discard(session_id)

        record_session_operation("cancel", ok=True)
        logger.info("session_cancelled", session_id=session_id, show_id=snapshot.show_id)
        return True

    async def discard(self, session_id: str) -> None:
        await self.store.delete(session_key(session_id))

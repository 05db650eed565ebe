"""
Hold manager: short-lived, per-seat claims in the key-value store.

HOLD STRATEGY: one key per seat, SET NX for acquisition
=======================================================

Problem:
  Two users pick the same seat and both head to payment. The ledger only
  learns about the sale at commit time, so without an earlier claim both
  users pay and one of them loses at the very last step.

Solution:
  Each seat gets one hold key whose value is the claimant id, written with
  SET NX EX. The store guarantees a single winner per key. The owner may
  re-issue the call to slide the TTL back to the full duration; anyone
  else gets a conflict naming the seat.

  - Acquire is atomic (no check-then-set window)
  - Refresh and release compare the owner and act in one server-side step
  - Holds expire on their own, so an abandoned checkout frees its seats
    within HOLD_TTL_SECONDS without any sweeper

Holds are advisory. The ledger's conditional UPDATE at confirm time is the
hard guarantee; holds only keep honest users from colliding mid-checkout.

Seats are processed in sorted label order. A conflict stops processing at
that seat; seats already created or refreshed by the same call stay held
and are reported on the error. Callers wanting all-or-nothing release
them, or rely on checkout, which refuses to open a session unless every
seat is held.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.core.config import get_settings
from reservation_core.core.errors import SeatHeldError, SeatNotHeldError
from reservation_core.core.logging import get_logger
from reservation_core.core.metrics import record_hold_attempt, record_hold_release
from reservation_core.core.seats import hold_key, normalize_labels, valid_labels
from reservation_core.infrastructure.store import KeyValueStore
from reservation_core.services.seat_service import ensure_sellable

logger = get_logger(__name__)

# One retry covers a hold that lapses between SET NX and the owner check
ACQUIRE_ATTEMPTS = 2


class HoldAction(str, enum.Enum):
    CREATED = "created"
    REFRESHED = "refreshed"


@dataclass(frozen=True)
class SeatHold:
    seat_label: str
    action: HoldAction


class HoldManager:
    def __init__(self, store: KeyValueStore, ttl_seconds: Optional[int] = None):
        self.store = store
        self.ttl = ttl_seconds or get_settings().HOLD_TTL_SECONDS

    async def _acquire_one(self, show_id: int, label: str, claimant_id: str) -> HoldAction:
        key = hold_key(show_id, label)
        for _ in range(ACQUIRE_ATTEMPTS):
            if await self.store.set_if_absent(key, claimant_id, self.ttl):
                return HoldAction.CREATED
            if await self.store.expire_if_equals(key, claimant_id, self.ttl):
                return HoldAction.REFRESHED
            if await self.store.get(key) is not None:
                break
        raise SeatHeldError(label)

    async def acquire_holds(
        self,
        show_id: int,
        seat_labels: Iterable[str],
        claimant_id: str,
    ) -> list[SeatHold]:
        """
        Create or refresh holds for every seat, in sorted order.
        Raises SeatHeldError for the first seat held by someone else.
        """
        labels = normalize_labels(seat_labels)
        acquired: list[SeatHold] = []

        for label in labels:
            try:
                action = await self._acquire_one(show_id, label, claimant_id)
            except SeatHeldError:
                record_hold_attempt("conflict")
                logger.info(
                    "hold_conflict",
                    show_id=show_id,
                    seat=label,
                    acquired=[hold.seat_label for hold in acquired],
                )
                raise SeatHeldError(label, acquired=acquired)
            record_hold_attempt(action.value)
            acquired.append(SeatHold(seat_label=label, action=action))

        logger.info(
            "holds_acquired",
            show_id=show_id,
            seats=labels,
            created=sum(1 for hold in acquired if hold.action is HoldAction.CREATED),
            ttl=self.ttl,
        )
        return acquired

    async def validate_then_hold(
        self,
        db: AsyncSession,
        show_id: int,
        seat_labels: Iterable[str],
        claimant_id: str,
    ) -> list[SeatHold]:
        """
        Check the ledger first and only then take holds. Nothing is acquired
        if any seat is missing, booked or blocked.
        """
        labels = normalize_labels(seat_labels)
        await ensure_sellable(db, show_id, labels)
        return await self.acquire_holds(show_id, labels, claimant_id)

    async def release_holds(
        self,
        show_id: int,
        seat_labels: Iterable[str],
        claimant_id: str,
    ) -> int:
        """
        Delete the caller's holds. Seats not held, already expired or held
        by another claimant are skipped silently, as are labels that cannot
        name a seat at all. Returns how many were released.
        """
        labels = valid_labels(seat_labels)
        released = 0
        for label in labels:
            deleted = await self.store.delete_if_equals(hold_key(show_id, label), claimant_id)
            record_hold_release(deleted)
            released += int(deleted)

        logger.info("holds_released", show_id=show_id, requested=len(labels), released=released)
        return released

    async def holders(self, show_id: int, labels: list[str]) -> dict[str, Optional[str]]:
        """Current owner of each label's hold, None where no live hold exists."""
        owners = await self.store.get_many([hold_key(show_id, label) for label in labels])
        return dict(zip(labels, owners))

    async def missing_holds(
        self,
        show_id: int,
        seat_labels: Iterable[str],
        claimant_id: str,
    ) -> list[str]:
        labels = normalize_labels(seat_labels)
        owners = await self.holders(show_id, labels)
        return [label for label in labels if owners[label] != claimant_id]

    async def ensure_held(
        self,
        show_id: int,
        seat_labels: Iterable[str],
        claimant_id: str,
    ) -> None:
        """Raise SeatNotHeldError naming the first seat the caller no longer holds."""
        missing = await self.missing_holds(show_id, seat_labels, claimant_id)
        if missing:
            logger.info("holds_missing", show_id=show_id, missing=missing)
            raise SeatNotHeldError(missing[0], missing=missing)

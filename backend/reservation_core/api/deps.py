"""
FastAPI dependencies wiring the store-backed services.
Tests override get_kv_store to swap in an in-memory store.
"""

from fastapi import Depends

from reservation_core.infrastructure.store import KeyValueStore
from reservation_core.infrastructure.store_factory import get_store
from reservation_core.services.checkout_service import CheckoutSessions
from reservation_core.services.hold_service import HoldManager


def get_kv_store() -> KeyValueStore:
    return get_store()


def get_hold_manager(store: KeyValueStore = Depends(get_kv_store)) -> HoldManager:
    return HoldManager(store)


def get_checkout_sessions(
    store: KeyValueStore = Depends(get_kv_store),
    holds: HoldManager = Depends(get_hold_manager),
) -> CheckoutSessions:
    return CheckoutSessions(store, holds)

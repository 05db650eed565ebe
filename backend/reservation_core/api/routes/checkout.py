"""
Checkout endpoints: payment sessions and booking confirmation.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_core.api.deps import get_checkout_sessions
from reservation_core.core.security import get_current_claimant_id
from reservation_core.db.session import get_db
from reservation_core.schemas.booking import BookingConfirm, BookingResponse
from reservation_core.schemas.checkout import (
    CheckoutSessionCancel,
    CheckoutSessionCancelResponse,
    CheckoutSessionCreate,
    CheckoutSessionCreated,
    CheckoutSessionResponse,
)
from reservation_core.services.booking_service import confirm_booking
from reservation_core.services.checkout_service import CheckoutSessions

router = APIRouter(prefix="/payments", tags=["Checkout"])


@router.post("/session", response_model=CheckoutSessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: CheckoutSessionCreate,
    claimant_id: str = Depends(get_current_claimant_id),
    db: AsyncSession = Depends(get_db),
    sessions: CheckoutSessions = Depends(get_checkout_sessions),
):
    """
    Open a payment session for seats the caller already holds.
    The session expires on its own if payment never completes.
    """
    session = await sessions.create_session(
        db, claimant_id, payload.show_id, payload.seats, payload.amount
    )
    return CheckoutSessionCreated(session_id=session.session_id, expires_in=session.ttl)


@router.get("/session/{session_id}", response_model=CheckoutSessionResponse)
async def get_session(
    session_id: str,
    claimant_id: str = Depends(get_current_claimant_id),
    sessions: CheckoutSessions = Depends(get_checkout_sessions),
):
    """Session snapshot with the remaining TTL."""
    session = await sessions.get_session(session_id, claimant_id)
    return CheckoutSessionResponse(session_id=session.session_id, ttl=session.ttl, data=session.snapshot)


@router.post("/cancel", response_model=CheckoutSessionCancelResponse)
async def cancel_session(
    payload: CheckoutSessionCancel,
    claimant_id: str = Depends(get_current_claimant_id),
    sessions: CheckoutSessions = Depends(get_checkout_sessions),
):
    """Release the session's holds and drop it. Safe to repeat."""
    cancelled = await sessions.cancel_session(payload.session_id, claimant_id)
    message = "Payment cancelled and holds released" if cancelled else "Session already expired"
    return CheckoutSessionCancelResponse(
        message=message,
        session_id=payload.session_id,
        cancelled=cancelled,
    )


@router.post("/confirm", response_model=BookingResponse)
async def confirm(
    payload: BookingConfirm,
    claimant_id: str = Depends(get_current_claimant_id),
    db: AsyncSession = Depends(get_db),
    sessions: CheckoutSessions = Depends(get_checkout_sessions),
):
    """
    Finalize a paid session into a booking. The payment itself is verified
    by the payment provider before this is called.
    """
    booking = await confirm_booking(
        db, sessions, payload.session_id, claimant_id, payload.payment_reference
    )
    return BookingResponse.model_validate(booking)

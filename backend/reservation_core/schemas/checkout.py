"""
Pydantic schemas for checkout sessions.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CheckoutSessionSnapshot(BaseModel):
    """What is stored under the session key: one claimant's intent to pay."""

    claimant_id: str
    show_id: int
    seat_labels: list[str]
    amount: Decimal
    created_at: datetime


class CheckoutSessionCreate(BaseModel):
    show_id: int = Field(..., gt=0)
    seats: list[str] = Field(..., min_length=1, max_length=20)
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class CheckoutSessionCreated(BaseModel):
    session_id: str
    expires_in: int


class CheckoutSessionResponse(BaseModel):
    session_id: str
    ttl: int
    data: CheckoutSessionSnapshot


class CheckoutSessionCancel(BaseModel):
    session_id: str = Field(..., min_length=1)


class CheckoutSessionCancelResponse(BaseModel):
    message: str
    session_id: str
    cancelled: bool

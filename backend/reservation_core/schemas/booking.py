"""
Pydantic schemas for booking confirmation, history and analytics.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class BookingConfirm(BaseModel):
    session_id: str = Field(..., min_length=1)
    # Supplied by the payment provider once it has verified the payment
    payment_reference: Optional[str] = Field(None, max_length=128)
    payment_method: Optional[str] = Field(None, max_length=32)


class BookingResponse(BaseModel):
    id: int
    claimant_id: str
    show_id: int
    total_amount: Decimal
    status: str
    payment_reference: str
    booked_at: datetime
    seats: list[str] = Field(validation_alias="seat_labels")

    model_config = {"from_attributes": True, "populate_by_name": True}


class AnalyticsTotals(BaseModel):
    revenue: Decimal
    bookings: int


class AnalyticsSeats(BaseModel):
    sold: int
    available: int


class ShowRevenue(BaseModel):
    show_id: int
    revenue: Decimal
    bookings: int


class DailyRevenue(BaseModel):
    day: date
    revenue: Decimal
    bookings: int


class BookingAnalyticsResponse(BaseModel):
    totals: AnalyticsTotals
    seats: AnalyticsSeats
    revenue_by_show: list[ShowRevenue]
    revenue_by_day: list[DailyRevenue]

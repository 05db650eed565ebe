"""
Pydantic schemas for seat provisioning and the seat map.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ShowSeatsCreate(BaseModel):
    show_id: int = Field(..., gt=0)
    seats: list[str] = Field(..., min_length=1, max_length=2000)


class ShowSeatsCreated(BaseModel):
    show_id: int
    requested: int
    created: int


class SeatView(BaseModel):
    seat_label: str
    # "held" is a view-only state: available in the ledger, with a live hold
    status: Literal["available", "held", "booked", "blocked"]
    held_by_me: bool = False


class SeatMapResponse(BaseModel):
    show_id: int
    count: int
    seats: list[SeatView]

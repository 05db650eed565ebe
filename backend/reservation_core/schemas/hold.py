"""
Pydantic schemas for seat hold requests and responses.
"""

from pydantic import BaseModel, Field


class HoldRequest(BaseModel):
    show_id: int = Field(..., gt=0)
    seats: list[str] = Field(..., min_length=1, max_length=20)


class SeatHoldResponse(BaseModel):
    seat_label: str
    action: str

    model_config = {"from_attributes": True}


class HoldResponse(BaseModel):
    message: str
    ttl: int
    data: list[SeatHoldResponse]


class ReleaseResponse(BaseModel):
    message: str
    released: int


class HoldCheckResponse(BaseModel):
    ok: bool


class ClaimantHoldsResponse(BaseModel):
    show_id: int
    total: int
    seats: list[str]

from reservation_core.schemas.hold import HoldRequest, HoldResponse, ReleaseResponse, HoldCheckResponse
from reservation_core.schemas.seat import ShowSeatsCreate, ShowSeatsCreated, SeatMapResponse
from reservation_core.schemas.checkout import (
    CheckoutSessionSnapshot, CheckoutSessionCreate, CheckoutSessionCreated,
    CheckoutSessionResponse, CheckoutSessionCancel, CheckoutSessionCancelResponse,
)
from reservation_core.schemas.booking import BookingConfirm, BookingResponse, BookingAnalyticsResponse

__all__ = [
    "HoldRequest", "HoldResponse", "ReleaseResponse", "HoldCheckResponse",
    "ShowSeatsCreate", "ShowSeatsCreated", "SeatMapResponse",
    "CheckoutSessionSnapshot", "CheckoutSessionCreate", "CheckoutSessionCreated",
    "CheckoutSessionResponse", "CheckoutSessionCancel", "CheckoutSessionCancelResponse",
    "BookingConfirm", "BookingResponse", "BookingAnalyticsResponse",
]

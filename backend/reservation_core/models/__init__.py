from reservation_core.models.seat import ShowSeat, SeatStatus
from reservation_core.models.booking import Booking, BookingSeat, BookingStatus

__all__ = ["ShowSeat", "SeatStatus", "Booking", "BookingSeat", "BookingStatus"]

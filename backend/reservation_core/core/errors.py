"""
Domain errors for the reservation core.

Every error carries the HTTP status it maps to, so routes never translate
by hand. Conflicts always name the seat in contention; forbidden errors
never reveal who owns the resource.
"""

from typing import Optional


class ReservationError(Exception):
    status_code = 400

    def __init__(self, message: str, seat_label: Optional[str] = None):
        self.message = message
        self.seat_label = seat_label
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"detail": self.message}
        if self.seat_label is not None:
            body["seat_label"] = self.seat_label
        return body


# Conflicts (409)

class ConflictError(ReservationError):
    status_code = 409


class SeatHeldError(ConflictError):
    def __init__(self, seat_label: str, acquired: Optional[list] = None):
        super().__init__(f"Seat {seat_label} is already held", seat_label)
        # Seats this call created or refreshed before hitting the conflict
        self.acquired = acquired or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["acquired"] = [
            {"seat_label": hold.seat_label, "action": hold.action.value} for hold in self.acquired
        ]
        return body


class SeatBookedError(ConflictError):
    def __init__(self, seat_label: str):
        super().__init__(f"Seat {seat_label} already booked", seat_label)


class SeatBlockedError(ConflictError):
    def __init__(self, seat_label: str):
        super().__init__(f"Seat {seat_label} is blocked", seat_label)


class SeatNotHeldError(ConflictError):
    def __init__(self, seat_label: str, missing: Optional[list] = None):
        super().__init__(f"Seat {seat_label} no longer held", seat_label)
        self.missing = missing or [seat_label]

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["missing"] = self.missing
        return body


# Not found (404 / 410)

class NotFoundError(ReservationError):
    status_code = 404


class SeatNotFoundError(NotFoundError):
    def __init__(self, seat_label: str, show_id: int):
        super().__init__(f"Seat {seat_label} does not exist for show {show_id}", seat_label)


class ShowNotFoundError(NotFoundError):
    def __init__(self, show_id: int):
        super().__init__(f"No seats found for show {show_id}")


class SessionNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Session not found or expired")


class SessionExpiredError(NotFoundError):
    status_code = 410

    def __init__(self):
        super().__init__("Payment session expired")


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")


# Forbidden (403)

class ForbiddenError(ReservationError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


# Infrastructure (503)

class InfrastructureError(ReservationError):
    status_code = 503


class StoreUnavailableError(InfrastructureError):
    def __init__(self, operation: str):
        super().__init__(f"Hold store unavailable during {operation}")
        self.operation = operation


class LedgerUnavailableError(InfrastructureError):
    def __init__(self, operation: str):
        super().__init__(f"Seat ledger unavailable during {operation}")
        self.operation = operation

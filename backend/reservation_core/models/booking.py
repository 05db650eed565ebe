"""
Booking records written by the finalizer.

Key design decisions:
- One booking row per successful confirm, plus one child row per seat
- Unique constraint on booking_seats (show_id, seat_label) backs the
  conditional seat update: a seat can never appear in two bookings
- Rows are immutable once committed (no refund flow here)
"""

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from reservation_core.db.base import Base


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    claimant_id = Column(String(64), nullable=False, index=True)
    show_id = Column(Integer, nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    payment_reference = Column(String(128), nullable=False)
    booked_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    seats = relationship(
        "BookingSeat",
        back_populates="booking",
        lazy="selectin",
        order_by="BookingSeat.seat_label",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        CheckConstraint("status IN ('confirmed')", name="check_booking_status"),
    )

    @property
    def seat_labels(self) -> list[str]:
        return [seat.seat_label for seat in self.seats]

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, claimant={self.claimant_id}, show={self.show_id}, status={self.status})>"


class BookingSeat(Base):
    __tablename__ = "booking_seats"

    id = Column(Integer, primary_key=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    show_id = Column(Integer, nullable=False)
    seat_label = Column(String(16), nullable=False)

    booking = relationship("Booking", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("show_id", "seat_label", name="uq_booking_seat_show_label"),
    )

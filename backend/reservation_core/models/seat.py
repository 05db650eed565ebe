"""
Seat ledger: authoritative sale status per (show, seat).

Key design decisions:
- Natural key (show_id, seat_label); labels are stored normalized
- status is a closed enum; only the booking finalizer writes BOOKED,
  and only through a conditional UPDATE ... WHERE status = 'available'
- BLOCKED is set out-of-band and never cleared by this service
"""

import enum

from sqlalchemy import CheckConstraint, Column, Index, Integer, String

from reservation_core.db.base import Base, TimestampMixin


class SeatStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


class ShowSeat(Base, TimestampMixin):
    __tablename__ = "show_seats"

    show_id = Column(Integer, primary_key=True)
    seat_label = Column(String(16), primary_key=True)
    status = Column(String(16), nullable=False, default=SeatStatus.AVAILABLE.value)

    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'booked', 'blocked')",
            name="check_show_seat_status",
        ),
        # Seat map and availability counts filter by status within a show
        Index("ix_show_seats_show_status", "show_id", "status"),
    )

    @property
    def seat_status(self) -> SeatStatus:
        return SeatStatus(self.status)

    def __repr__(self) -> str:
        return f"<ShowSeat(show={self.show_id}, seat={self.seat_label}, status={self.status})>"

"""Seat ledger schema: show_seats, bookings, booking_seats.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Seats per show, keyed by the normalized label
    op.create_table(
        "show_seats",
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("seat_label", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'available'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("show_id", "seat_label"),
        sa.CheckConstraint("status IN ('available', 'booked', 'blocked')", name="check_show_seat_status"),
    )
    # The seat map and availability counts filter by status within a show.
    # The primary key already serves the per-seat conditional UPDATE.
    op.create_index("ix_show_seats_show_status", "show_seats", ["show_id", "status"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("claimant_id", sa.String(64), nullable=False),
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("payment_reference", sa.String(128), nullable=False),
        sa.Column("booked_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        sa.CheckConstraint("status IN ('confirmed')", name="check_booking_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_claimant_id", "bookings", ["claimant_id"])
    op.create_index("ix_bookings_show_id", "bookings", ["show_id"])

    op.create_table(
        "booking_seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("seat_label", sa.String(16), nullable=False),
        # Second line of defence behind the conditional seat UPDATE
        sa.UniqueConstraint("show_id", "seat_label", name="uq_booking_seat_show_label"),
    )
    op.create_index("ix_booking_seats_booking_id", "booking_seats", ["booking_id"])


def downgrade() -> None:
    op.drop_table("booking_seats")
    op.drop_table("bookings")
    op.drop_table("show_seats")

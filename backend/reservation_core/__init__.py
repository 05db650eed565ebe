"""Seat-hold and booking concurrency core."""

__version__ = "1.0.0"

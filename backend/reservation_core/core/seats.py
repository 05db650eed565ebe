"""
Seat label normalization and key naming shared by holds and sessions.

Hold keys use one key per seat holding the claimant id:

    hold:show:<show_id>:<SEAT_LABEL>  ->  "<claimant_id>"

so ownership checks are a single GET and acquisition a single SET NX.
"""

from typing import Iterable

from reservation_core.core.config import get_settings

settings = get_settings()

# Matches the seat_label column width in show_seats and booking_seats
MAX_LABEL_LENGTH = 16


def normalize_label(raw: str) -> str:
    label = str(raw).strip().upper()
    if not label:
        raise ValueError("Seat label must not be empty")
    if len(label) > MAX_LABEL_LENGTH:
        raise ValueError(f"Seat label must be at most {MAX_LABEL_LENGTH} characters")
    return label


def normalize_labels(raw_labels: Iterable[str]) -> list[str]:
    """Normalize, de-duplicate and sort labels so every caller walks seats in the same order."""
    labels = sorted({normalize_label(raw) for raw in raw_labels})
    if not labels:
        raise ValueError("At least one seat label is required")
    return labels


def valid_labels(raw_labels: Iterable[str]) -> list[str]:
    """
    Lenient variant for release paths: labels that could never name a seat
    are dropped instead of raised, and an empty result is allowed.
    """
    labels = set()
    for raw in raw_labels:
        try:
            labels.add(normalize_label(raw))
        except ValueError:
            continue
    return sorted(labels)


def hold_key(show_id: int, seat_label: str) -> str:
    return f"{settings.HOLD_KEY_PREFIX}:{show_id}:{seat_label}"


def session_key(session_id: str) -> str:
    return f"{settings.SESSION_KEY_PREFIX}:{session_id}"

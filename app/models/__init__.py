"""Database models"""

from app.models.reservation import (
    Reservation,
    ReservationStatus,
    ReservationTimeSlot,
    StatusTransitionError,
)

__all__ = [
    "Reservation",
    "ReservationStatus",
    "ReservationTimeSlot",
    "StatusTransitionError",
]

"""Reservation model"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Integer, DateTime, Text, Index, Uuid

from app.database import Base
from app.utils.dates import utcnow


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    REQUESTED = "requested"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ReservationTimeSlot(str, enum.Enum):
    LUNCH = "lunch"
    DINNER = "dinner"


ACTIVE_STATUSES = (ReservationStatus.REQUESTED.value, ReservationStatus.APPROVED.value)
TERMINAL_STATUSES = (ReservationStatus.CANCELLED.value, ReservationStatus.COMPLETED.value)

ALLOWED_TRANSITIONS = {
    ReservationStatus.REQUESTED.value: {ReservationStatus.APPROVED.value, ReservationStatus.CANCELLED.value},
    ReservationStatus.APPROVED.value: {ReservationStatus.COMPLETED.value, ReservationStatus.CANCELLED.value},
    ReservationStatus.CANCELLED.value: set(),
    ReservationStatus.COMPLETED.value: set(),
}


def is_valid_status(value) -> bool:
    return value in ALLOWED_TRANSITIONS


class StatusTransitionError(ValueError):
    """Raised when a status change is not allowed"""


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_arrival_slot_status", "expected_arrival_date", "expected_arrival_time", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Guest information
    guest_name = Column(String(100), nullable=False)
    guest_phone = Column(String(20), nullable=False, index=True)
    guest_email = Column(String(100), index=True)

    # Reservation details
    expected_arrival_date = Column(DateTime, nullable=False)  # naive UTC
    expected_arrival_time = Column(String(20), nullable=False, default=ReservationTimeSlot.DINNER.value)
    table_size = Column(Integer, nullable=False)
    special_requests = Column(Text, default="")

    # Status
    status = Column(String(20), nullable=False, default=ReservationStatus.REQUESTED.value, index=True)
    reservation_code = Column(String(16), nullable=False, unique=True)

    # Staff handling
    remarks = Column(String(100), default="")
    approved_by = Column(String(64))
    cancelled_by = Column(String(64))
    approved_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    completed_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def transition_to(self, new_status: str, actor: Optional[str] = None, now: Optional[datetime] = None) -> None:
        """Move to ``new_status`` and stamp the matching timestamp once.

        Raises StatusTransitionError for unknown targets, no-op changes and
        anything leaving a terminal state.
        """
        target = new_status.value if isinstance(new_status, ReservationStatus) else new_status
        if not is_valid_status(target):
            raise StatusTransitionError("Invalid status")

        current = self.status or ReservationStatus.REQUESTED.value
        if current == target:
            raise StatusTransitionError("Status not changed")
        if current in TERMINAL_STATUSES:
            raise StatusTransitionError(f"Cannot update {current} reservation")
        if target not in ALLOWED_TRANSITIONS[current]:
            raise StatusTransitionError(f"Cannot change status from {current} to {target}")

        now = now or utcnow()
        self.status = target

        if target == ReservationStatus.APPROVED.value:
            if self.approved_at is None:
                self.approved_at = now
            if actor:
                self.approved_by = actor
        elif target == ReservationStatus.CANCELLED.value:
            if self.cancelled_at is None:
                self.cancelled_at = now
            if actor:
                self.cancelled_by = actor
        elif target == ReservationStatus.COMPLETED.value:
            if self.completed_at is None:
                self.completed_at = now

"""Pydantic schemas for request/response validation"""

from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationCancel,
    ReservationStatusUpdate,
    ReservationResponse,
    ReservationQueryVariables,
    ReservationQueryRequest,
    ReservationQueryResponse,
    QueryMetadata,
)

__all__ = [
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationCancel",
    "ReservationStatusUpdate",
    "ReservationResponse",
    "ReservationQueryVariables",
    "ReservationQueryRequest",
    "ReservationQueryResponse",
    "QueryMetadata",
]

"""Reservation schemas

Wire names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, EmailStr, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings
from app.models.reservation import ReservationStatus, ReservationTimeSlot
from app.utils.dates import as_utc, display_date

# offsets and limits must fit a signed 32-bit integer
MAX_PAGINATION_VALUE = 2**31 - 1


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


def _normalise_email(value: Any) -> Any:
    # an empty string means no e-mail was given
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value


class ReservationCreate(CamelModel):
    """Create reservation request"""
    guest_name: str = Field(min_length=1, max_length=100)
    guest_phone: str = Field(min_length=1, max_length=20)
    guest_email: Optional[EmailStr] = None
    expected_arrival_date: datetime
    expected_arrival_time: ReservationTimeSlot
    table_size: int = Field(ge=1, le=20)
    special_requests: Optional[str] = Field(None, max_length=500)

    @field_validator("guest_email", mode="before")
    @classmethod
    def normalise_email(cls, value: Any) -> Any:
        return _normalise_email(value)


class ReservationUpdate(CamelModel):
    """Guest update request, every field optional"""
    guest_name: Optional[str] = Field(None, min_length=1, max_length=100)
    guest_phone: Optional[str] = Field(None, min_length=1, max_length=20)
    guest_email: Optional[EmailStr] = None
    expected_arrival_date: Optional[datetime] = None
    expected_arrival_time: Optional[ReservationTimeSlot] = None
    table_size: Optional[int] = Field(None, ge=1, le=20)
    special_requests: Optional[str] = Field(None, max_length=500)

    @field_validator("guest_email", mode="before")
    @classmethod
    def normalise_email(cls, value: Any) -> Any:
        return _normalise_email(value)


class ReservationCancel(CamelModel):
    """Guest cancellation; the caller identity is optional"""
    user_id: Optional[str] = Field(None, max_length=64)


class ReservationStatusUpdate(CamelModel):
    """Staff status change.

    ``status`` stays a loose optional string so missing or unknown values
    come back as a 400 "Invalid status" rather than a schema error.
    """
    status: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=100)
    user_id: Optional[str] = Field(None, max_length=64)


class ReservationResponse(CamelModel):
    """Reservation response"""
    id: UUID = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    guest_name: str
    guest_phone: str
    guest_email: Optional[str] = None
    expected_arrival_date: datetime
    expected_arrival_time: ReservationTimeSlot
    table_size: int
    special_requests: Optional[str] = ""
    status: ReservationStatus
    reservation_code: str
    remarks: Optional[str] = ""
    approved_by: Optional[str] = None
    cancelled_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

    @field_validator(
        "expected_arrival_date", "approved_at", "cancelled_at", "completed_at", "created_at", "updated_at"
    )
    @classmethod
    def stored_values_are_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @computed_field(alias="arrivalDate")
    @property
    def arrival_date(self) -> str:
        """Arrival calendar date in the restaurant's display timezone"""
        return display_date(self.expected_arrival_date, settings.display_utc_offset_hours)


class ReservationQueryVariables(CamelModel):
    """Typed variables of the staff query endpoint"""
    date: Optional[str] = None
    status: Optional[str] = None
    search_text: Optional[str] = None
    page: int = Field(1, ge=1, le=MAX_PAGINATION_VALUE)
    limit: int = Field(0, ge=0, le=MAX_PAGINATION_VALUE)
    sort_by: str = "status"
    sort_order: str = "asc"


class ReservationQueryRequest(BaseModel):
    """Body of the staff query endpoint"""
    query: Optional[Any] = None
    variables: Optional[Any] = None


class QueryMetadata(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ReservationQueryResponse(CamelModel):
    data: List[Dict[str, Any]]
    metadata: QueryMetadata

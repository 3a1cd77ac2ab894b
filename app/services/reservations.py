"""Reservation business rules for guest and staff operations"""

import re
import secrets
import string
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from sqlalchemy import case
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.errors import BadRequestError, ConflictError, InternalError, NotFoundError
from app.models.reservation import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
    StatusTransitionError,
    is_valid_status,
)
from app.schemas.reservation import (
    ReservationCreate,
    ReservationQueryRequest,
    ReservationQueryResponse,
    ReservationStatusUpdate,
    ReservationUpdate,
)
from app.services.query import QUERY_FIELDS, build_query
from app.services.repository import ReservationRepo
from app.utils.dates import as_utc, day_window, parse_day, to_naive_utc, utcnow

logger = structlog.get_logger()

PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$")
CODE_ALPHABET = string.ascii_uppercase + string.digits


class CodeAllocationError(RuntimeError):
    """No unique reservation code found within the attempt budget"""


def parse_reservation_id(reservation_id: str) -> UUID:
    try:
        return UUID(reservation_id)
    except (TypeError, ValueError):
        raise BadRequestError("Invalid reservation ID")


def validate_phone(phone: str) -> None:
    if not PHONE_PATTERN.match(phone):
        raise BadRequestError("Invalid phone number.")


def ensure_future(arrival: datetime, message: str = "Expected arrival time must be in the future") -> datetime:
    """Return the arrival as naive UTC, rejecting anything not after now"""
    arrival = to_naive_utc(arrival)
    if arrival <= utcnow():
        raise BadRequestError(message)
    return arrival


async def check_conflict(repo: ReservationRepo, phone: str, arrival: datetime) -> None:
    """Raise ConflictError if the guest already holds an active reservation that day"""
    start, end = day_window(arrival.date())
    existing = await repo.find_one(
        Reservation.guest_phone == phone,
        Reservation.expected_arrival_date.between(start, end),
        Reservation.status.in_(ACTIVE_STATUSES),
    )
    if existing is not None:
        logger.info("Reservation conflict", phone=phone, day=arrival.date().isoformat(), existing_id=str(existing.id))
        raise ConflictError()


def generate_reservation_code(length: Optional[int] = None) -> str:
    length = length or settings.reservation_code_length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


async def allocate_reservation_code(repo: ReservationRepo, max_attempts: Optional[int] = None) -> str:
    """Generate a code not yet used by any reservation"""
    max_attempts = max_attempts or settings.reservation_code_max_attempts
    for attempt in range(1, max_attempts + 1):
        code = generate_reservation_code()
        if not await repo.code_exists(code):
            return code
        logger.warning("Reservation code collision", code=code, attempt=attempt)
    raise CodeAllocationError(f"No unique reservation code after {max_attempts} attempts")


# -------- Guest operations --------

async def create_reservation(repo: ReservationRepo, data: ReservationCreate) -> Reservation:
    validate_phone(data.guest_phone)
    arrival = ensure_future(data.expected_arrival_date)
    await check_conflict(repo, data.guest_phone, arrival)

    values = data.model_dump(exclude_unset=True)
    values["expected_arrival_date"] = arrival
    values["expected_arrival_time"] = data.expected_arrival_time.value
    values["special_requests"] = values.get("special_requests") or ""

    attempts = settings.reservation_code_max_attempts
    for attempt in range(1, attempts + 1):
        try:
            code = await allocate_reservation_code(repo)
        except CodeAllocationError as exc:
            logger.error("Reservation code allocation failed", error=str(exc))
            raise InternalError("Failed to generate a unique reservation code")

        reservation = Reservation(
            **values,
            reservation_code=code,
            status=ReservationStatus.REQUESTED.value,
        )
        try:
            reservation = await repo.insert(reservation)
        except IntegrityError:
            # code taken between the lookup and the insert
            await repo.rollback()
            logger.warning("Reservation code taken on insert", code=code, attempt=attempt)
            continue

        logger.info(
            "Reservation created",
            reservation_id=str(reservation.id),
            reservation_code=reservation.reservation_code,
            arrival=reservation.expected_arrival_date.isoformat(),
        )
        return reservation

    raise InternalError("Failed to generate a unique reservation code")


async def _get_or_404(repo: ReservationRepo, reservation_id: str) -> Reservation:
    reservation = await repo.find_by_id(parse_reservation_id(reservation_id))
    if reservation is None:
        raise NotFoundError("Reservation not found")
    return reservation


async def update_reservation(repo: ReservationRepo, reservation_id: str, data: ReservationUpdate) -> Reservation:
    """Partial guest update, only while the reservation is still requested"""
    reservation = await _get_or_404(repo, reservation_id)

    if reservation.status and reservation.status != ReservationStatus.REQUESTED.value:
        raise BadRequestError("Reservation is not in pending status, cannot be updated")

    values: Dict[str, Any] = data.model_dump(exclude_unset=True)
    # explicit nulls on required columns are ignored
    for required in ("guest_name", "guest_phone", "expected_arrival_date", "expected_arrival_time", "table_size"):
        if values.get(required, ...) is None:
            values.pop(required)

    phone = values.get("guest_phone", reservation.guest_phone)
    phone_changed = phone != reservation.guest_phone
    if phone_changed:
        validate_phone(phone)

    arrival = reservation.expected_arrival_date
    day_changed = False
    if "expected_arrival_date" in values:
        arrival = ensure_future(values["expected_arrival_date"], "Arrival time must be in the future")
        values["expected_arrival_date"] = arrival
        day_changed = arrival.date() != reservation.expected_arrival_date.date()

    if day_changed or phone_changed:
        await check_conflict(repo, phone, arrival)

    if "expected_arrival_time" in values:
        values["expected_arrival_time"] = data.expected_arrival_time.value
    if "special_requests" in values and values["special_requests"] is None:
        values["special_requests"] = ""

    updated = await repo.update_by_id(reservation.id, values)
    if updated is None:
        raise InternalError("Failed to update reservation")

    logger.info("Reservation updated by guest", reservation_id=str(updated.id), fields=sorted(values))
    return updated


async def cancel_reservation(repo: ReservationRepo, reservation_id: str, user_id: Optional[str] = None) -> Reservation:
    reservation = await _get_or_404(repo, reservation_id)

    if reservation.status == ReservationStatus.CANCELLED.value:
        raise BadRequestError("Reservation is already cancelled")
    if reservation.status == ReservationStatus.COMPLETED.value:
        raise BadRequestError("Cannot cancel a completed reservation")

    try:
        reservation.transition_to(ReservationStatus.CANCELLED, actor=user_id or None)
    except StatusTransitionError as exc:
        raise BadRequestError(str(exc))

    cancelled = await repo.save(reservation)
    logger.info("Reservation cancelled by guest", reservation_id=str(cancelled.id))
    return cancelled


async def find_active_reservation(
    repo: ReservationRepo,
    date: Optional[str],
    phone: Optional[str] = None,
    reservation_code: Optional[str] = None,
) -> Reservation:
    """Single reservation for a day, looked up by phone and/or code"""
    if not date:
        raise BadRequestError("Date is required")
    if not phone and not reservation_code:
        raise BadRequestError('Please provide at least one of "phone number" or "reservation code"')

    try:
        start, end = day_window(parse_day(date))
    except ValueError:
        raise BadRequestError("Invalid date")

    criteria = [Reservation.expected_arrival_date.between(start, end)]
    if phone:
        criteria.append(Reservation.guest_phone == phone)
    if reservation_code:
        criteria.append(Reservation.reservation_code == reservation_code)

    reservation = await repo.find_one(
        *criteria,
        order_by=(
            case((Reservation.status.in_(ACTIVE_STATUSES), 0), else_=1),
            Reservation.expected_arrival_date.asc(),
            Reservation.created_at.desc(),
        ),
    )

    if reservation is None:
        raise NotFoundError("Reservation not found")
    if not reservation.is_active:
        logger.info("Guest lookup hit inactive reservation", reservation_id=str(reservation.id), status=reservation.status)
        raise NotFoundError("No active reservation found")
    return reservation


# -------- Staff operations --------

async def get_reservation(repo: ReservationRepo, reservation_id: str) -> Reservation:
    return await _get_or_404(repo, reservation_id)


async def update_reservation_status(
    repo: ReservationRepo,
    reservation_id: str,
    data: ReservationStatusUpdate,
) -> Reservation:
    # the requested status is checked before the lookup
    if not is_valid_status(data.status):
        raise BadRequestError("Invalid status")

    reservation = await _get_or_404(repo, reservation_id)
    previous = reservation.status

    try:
        reservation.transition_to(data.status, actor=data.user_id or None)
    except StatusTransitionError as exc:
        logger.info(
            "Rejected status change",
            reservation_id=str(reservation.id),
            current=previous,
            requested=data.status,
            reason=str(exc),
        )
        raise BadRequestError(str(exc))

    if data.remarks:
        reservation.remarks = data.remarks

    updated = await repo.save(reservation)
    logger.info("Reservation status changed", reservation_id=str(updated.id), previous=previous, status=updated.status)
    return updated


async def query_reservations(repo: ReservationRepo, request: ReservationQueryRequest) -> ReservationQueryResponse:
    """Filtered, sorted, paginated and projected listing for staff"""
    query = build_query(request.query, request.variables)
    attributes = [QUERY_FIELDS[name] for name in query.fields]

    rows = await repo.find_many(
        *query.criteria,
        order_by=query.order_by,
        skip=query.skip,
        limit=query.limit,
        columns=attributes,
    )
    total = await repo.count(*query.criteria)

    data = []
    for row in rows:
        item = {}
        for name, attribute in zip(query.fields, attributes):
            value = row[attribute]
            if isinstance(value, datetime):
                value = as_utc(value)
            elif isinstance(value, UUID):
                value = str(value)
            item[name] = value
        data.append(item)

    return ReservationQueryResponse(
        data=data,
        metadata={
            "total": total,
            "page": query.page,
            "limit": query.limit,
            "totalPages": query.total_pages(total),
        },
    )

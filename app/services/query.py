"""Translation of the staff query endpoint into repository arguments.

The request mimics a GraphQL call, ``{ reservations { field field ... } }``
plus a ``variables`` object, but only field selection is read from the query
text. Filters, sorting and pagination come from the typed variables.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import or_

from app.errors import BadRequestError
from app.models.reservation import Reservation
from app.schemas.reservation import MAX_PAGINATION_VALUE, ReservationQueryVariables
from app.utils.dates import day_window, parse_day

INVALID_QUERY = "Invalid GraphQL query or variables"

# wire name -> model attribute
QUERY_FIELDS: Dict[str, str] = {
    "_id": "id",
    "guestName": "guest_name",
    "guestEmail": "guest_email",
    "guestPhone": "guest_phone",
    "tableSize": "table_size",
    "status": "status",
    "expectedArrivalDate": "expected_arrival_date",
    "expectedArrivalTime": "expected_arrival_time",
    "reservationCode": "reservation_code",
    "specialRequests": "special_requests",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SORT_FIELDS = ("status", "expectedArrivalDate")

_FIELDS_PATTERN = re.compile(r"{\s*reservations\s*{\s*([\w\s]+)}")


@dataclass
class ReservationQuery:
    fields: List[str]
    criteria: List[Any] = field(default_factory=list)
    order_by: List[Any] = field(default_factory=list)
    page: int = 1
    limit: int = 0

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        if not self.limit:
            return 1 if total else 0
        return math.ceil(total / self.limit)


def extract_fields(query: str) -> List[str]:
    """Whitelisted wire field names selected by the query text.

    Falls back to every field when the text does not match the grammar.
    Unknown names are dropped and ``_id`` is always first.
    """
    match = _FIELDS_PATTERN.search(query)
    if match:
        fields = [name for name in match.group(1).split() if name in QUERY_FIELDS]
    else:
        fields = list(QUERY_FIELDS)

    # keep first occurrence order
    fields = list(dict.fromkeys(fields))
    if "_id" not in fields:
        fields.insert(0, "_id")
    return fields


def parse_variables(variables: Optional[Any]) -> ReservationQueryVariables:
    if variables is None:
        return ReservationQueryVariables()
    if not isinstance(variables, dict):
        raise BadRequestError(INVALID_QUERY)
    try:
        return ReservationQueryVariables.model_validate(variables)
    except ValidationError:
        raise BadRequestError(INVALID_QUERY)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_query(query: Any, variables: Optional[Any]) -> ReservationQuery:
    """Build filters, sort and pagination for a query request.

    Raises BadRequestError for anything malformed.
    """
    if not isinstance(query, str):
        raise BadRequestError(INVALID_QUERY)

    params = parse_variables(variables)
    result = ReservationQuery(fields=extract_fields(query), page=params.page, limit=params.limit)
    if result.skip > MAX_PAGINATION_VALUE:
        raise BadRequestError(INVALID_QUERY)

    if params.date:
        try:
            start, end = day_window(parse_day(params.date))
        except ValueError:
            raise BadRequestError(INVALID_QUERY)
        result.criteria.append(Reservation.expected_arrival_date.between(start, end))

    if params.status:
        statuses = [s.strip() for s in params.status.split(",") if s.strip()]
        result.criteria.append(Reservation.status.in_(statuses))

    if params.search_text:
        pattern = f"%{_escape_like(params.search_text)}%"
        result.criteria.append(
            or_(
                Reservation.guest_phone.ilike(pattern, escape="\\"),
                Reservation.reservation_code.ilike(pattern, escape="\\"),
            )
        )

    descending = params.sort_order == "desc"
    if params.sort_by in SORT_FIELDS:
        column = getattr(Reservation, QUERY_FIELDS[params.sort_by])
        result.order_by.append(column.desc() if descending else column.asc())
        if params.sort_by == "status":
            # secondary key is always arrival ascending
            result.order_by.append(Reservation.expected_arrival_date.asc())
    else:
        result.order_by.append(Reservation.expected_arrival_date.asc())

    return result

"""Reservation API endpoints

Guest routes live under ``/reservations/guest`` and need no credentials.
Creation and the ``/reservations/admin`` routes require basic auth.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import require_basic_auth
from app.database import get_db
from app.schemas.reservation import (
    ReservationCancel,
    ReservationCreate,
    ReservationQueryRequest,
    ReservationQueryResponse,
    ReservationResponse,
    ReservationStatusUpdate,
    ReservationUpdate,
)
from app.services import reservations as service
from app.services.repository import ReservationRepo

router = APIRouter()


async def get_repo(db: AsyncSession = Depends(get_db)) -> ReservationRepo:
    return ReservationRepo(db)


# -------- Guest endpoints --------

@router.post(
    "",
    response_model=ReservationResponse,
    status_code=201,
    dependencies=[Depends(require_basic_auth)],
)
async def create_reservation(
    reservation_data: ReservationCreate,
    repo: ReservationRepo = Depends(get_repo),
):
    """Create a new reservation"""
    return await service.create_reservation(repo, reservation_data)


@router.get("/guest", response_model=ReservationResponse)
async def find_active_reservation(
    date: Optional[str] = None,
    phone: Optional[str] = None,
    reservation_code: Optional[str] = Query(None, alias="reservationCode"),
    repo: ReservationRepo = Depends(get_repo),
):
    """Find the guest's active reservation for a day by phone or code"""
    return await service.find_active_reservation(repo, date, phone, reservation_code)


@router.patch("/guest/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: str,
    reservation_data: ReservationUpdate,
    repo: ReservationRepo = Depends(get_repo),
):
    """Update a reservation that has not been handled yet"""
    return await service.update_reservation(repo, reservation_id, reservation_data)


@router.patch("/guest/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    cancel_data: Optional[ReservationCancel] = Body(None),
    repo: ReservationRepo = Depends(get_repo),
):
    """Cancel a reservation"""
    user_id = cancel_data.user_id if cancel_data else None
    return await service.cancel_reservation(repo, reservation_id, user_id)


# -------- Staff endpoints --------

admin_router = APIRouter(dependencies=[Depends(require_basic_auth)])


@admin_router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    repo: ReservationRepo = Depends(get_repo),
):
    """Get reservation details"""
    return await service.get_reservation(repo, reservation_id)


@admin_router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: str,
    status_data: ReservationStatusUpdate,
    repo: ReservationRepo = Depends(get_repo),
):
    """Approve, complete or cancel a reservation"""
    return await service.update_reservation_status(repo, reservation_id, status_data)


@admin_router.post("/graphql", response_model=ReservationQueryResponse)
async def query_reservations(
    request: ReservationQueryRequest,
    repo: ReservationRepo = Depends(get_repo),
):
    """Browse reservations with field selection, filters, sorting and paging"""
    return await service.query_reservations(repo, request)


router.include_router(admin_router, prefix="/admin")

"""
Repository layer over the reservations table.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.reservation import Reservation


class ReservationRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self.db.get(Reservation, reservation_id)

    async def find_one(self, *criteria, order_by: Sequence[Any] = ()) -> Optional[Reservation]:
        query = select(Reservation).where(*criteria).order_by(*order_by).limit(1)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def find_many(
        self,
        *criteria,
        order_by: Sequence[Any] = (),
        skip: int = 0,
        limit: int = 0,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Rows matching ``criteria`` as dicts keyed by attribute name.

        ``limit=0`` returns everything from ``skip`` on.
        """
        names = list(columns) if columns else [c.key for c in Reservation.__table__.columns]
        query = select(*[getattr(Reservation, name) for name in names]).where(*criteria).order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def count(self, *criteria) -> int:
        result = await self.db.execute(select(func.count(Reservation.id)).where(*criteria))
        return result.scalar() or 0

    async def code_exists(self, code: str) -> bool:
        return await self.find_one(Reservation.reservation_code == code) is not None

    async def insert(self, reservation: Reservation) -> Reservation:
        self.db.add(reservation)
        await self.db.commit()
        await self.db.refresh(reservation)
        return reservation

    async def save(self, reservation: Reservation) -> Reservation:
        await self.db.commit()
        await self.db.refresh(reservation)
        return reservation

    async def update_by_id(self, reservation_id: UUID, values: Dict[str, Any]) -> Optional[Reservation]:
        reservation = await self.find_by_id(reservation_id)
        if reservation is None:
            return None
        for field, value in values.items():
            setattr(reservation, field, value)
        return await self.save(reservation)

    async def rollback(self) -> None:
        await self.db.rollback()

#!/usr/bin/env python3
"""
Seed script to create demo reservations
"""

import asyncio
from datetime import timedelta


DEMO_GUESTS = [
    # name, phone, days ahead, hour (UTC), slot, table size, target status
    ("Li Wei", "13800000001", 1, 4, "lunch", 2, "requested"),
    ("Zhang Min", "13900000002", 1, 11, "dinner", 4, "approved"),
    ("Wang Fang", "15000000003", 2, 11, "dinner", 6, "requested"),
    ("Chen Jie", "18600000004", 3, 4, "lunch", 3, "cancelled"),
    ("Liu Yang", "17700000005", 3, 11, "dinner", 8, "approved"),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.database import SessionLocal, engine, Base
    from app.models.reservation import Reservation
    from app.services.reservations import allocate_reservation_code
    from app.services.repository import ReservationRepo
    from app.utils.dates import utcnow

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        repo = ReservationRepo(db)

        # Check if demo data already exists
        result = await db.execute(
            select(Reservation).where(Reservation.guest_phone == DEMO_GUESTS[0][1])
        )
        if result.scalars().first():
            print("Demo data already exists. Skipping...")
            return

        today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

        for name, phone, days_ahead, hour, slot, size, status in DEMO_GUESTS:
            reservation = Reservation(
                guest_name=name,
                guest_phone=phone,
                expected_arrival_date=today + timedelta(days=days_ahead, hours=hour),
                expected_arrival_time=slot,
                table_size=size,
                reservation_code=await allocate_reservation_code(repo),
                status="requested",
            )
            reservation = await repo.insert(reservation)

            if status != "requested":
                reservation.transition_to(status, actor="seed")
                await repo.save(reservation)

            print(f"Created reservation {reservation.reservation_code} for {name} ({reservation.status})")

    print("Demo data created.")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())

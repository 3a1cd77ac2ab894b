"""Tests for guest reservation endpoints"""

import re
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.reservation import Reservation
from app.utils.dates import utcnow
from conftest import iso_utc, tomorrow_at


def create_payload(**overrides):
    payload = {
        "guestName": "A",
        "guestPhone": "13800000000",
        "expectedArrivalDate": iso_utc(tomorrow_at()),
        "expectedArrivalTime": "dinner",
        "tableSize": 4,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_reservation(staff_client: AsyncClient):
    """Test creating a reservation"""
    response = await staff_client.post("/reservations", json=create_payload(specialRequests="  window seat  "))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "requested"
    assert re.fullmatch(r"[A-Z0-9]{6}", data["reservationCode"])
    assert data["guestName"] == "A"
    assert data["specialRequests"] == "window seat"
    assert data["expectedArrivalDate"].endswith("Z")
    assert data["arrivalDate"] == (tomorrow_at() + timedelta(hours=8)).date().isoformat()
    assert "_id" in data


@pytest.mark.asyncio
async def test_create_normalises_email(staff_client: AsyncClient):
    response = await staff_client.post("/reservations", json=create_payload(guestEmail=" Guest@Example.COM "))

    assert response.status_code == 201
    assert response.json()["guestEmail"] == "guest@example.com"


@pytest.mark.asyncio
async def test_create_treats_blank_email_as_absent(staff_client: AsyncClient):
    response = await staff_client.post("/reservations", json=create_payload(guestEmail=""))

    assert response.status_code == 201
    assert response.json()["guestEmail"] is None


@pytest.mark.asyncio
async def test_create_conflict_same_phone_same_day(staff_client: AsyncClient):
    """A second active reservation on the same day is a conflict"""
    first = await staff_client.post("/reservations", json=create_payload())
    assert first.status_code == 201

    second = await staff_client.post(
        "/reservations",
        json=create_payload(expectedArrivalDate=iso_utc(tomorrow_at(hour=12)), expectedArrivalTime="lunch"),
    )

    assert second.status_code == 409
    assert second.json()["detail"] == "You already have an active reservation for this date"


@pytest.mark.asyncio
async def test_create_allowed_when_previous_cancelled(staff_client: AsyncClient, make_reservation):
    await make_reservation(guest_phone="13800000000", status="cancelled")

    response = await staff_client.post("/reservations", json=create_payload())

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_allowed_on_another_day(staff_client: AsyncClient, make_reservation):
    await make_reservation(guest_phone="13800000000")

    response = await staff_client.post(
        "/reservations", json=create_payload(expectedArrivalDate=iso_utc(tomorrow_at(days=2)))
    )

    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("phone", ["1380000000", "12800000000", "+8613800000000", "abcdefghijk"])
async def test_create_rejects_invalid_phone(staff_client: AsyncClient, test_db, phone):
    response = await staff_client.post("/reservations", json=create_payload(guestPhone=phone))

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid phone number."
    result = await test_db.execute(select(Reservation))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_create_rejects_past_arrival(staff_client: AsyncClient):
    past = utcnow() - timedelta(minutes=5)

    response = await staff_client.post("/reservations", json=create_payload(expectedArrivalDate=iso_utc(past)))

    assert response.status_code == 400
    assert response.json()["detail"] == "Expected arrival time must be in the future"


@pytest.mark.asyncio
@pytest.mark.parametrize("table_size", [0, 21])
async def test_create_rejects_table_size_out_of_range(staff_client: AsyncClient, table_size):
    response = await staff_client.post("/reservations", json=create_payload(tableSize=table_size))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_requires_credentials(client: AsyncClient):
    response = await client.post("/reservations", json=create_payload())

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_find_active_by_phone(client: AsyncClient, make_reservation):
    reservation = await make_reservation(guest_phone="13800000000")

    response = await client.get(
        "/reservations/guest",
        params={"date": tomorrow_at().date().isoformat(), "phone": "13800000000"},
    )

    assert response.status_code == 200
    assert response.json()["_id"] == str(reservation.id)


@pytest.mark.asyncio
async def test_find_active_by_code(client: AsyncClient, make_reservation):
    reservation = await make_reservation(reservation_code="ABC123")

    response = await client.get(
        "/reservations/guest",
        params={"date": iso_utc(tomorrow_at()), "reservationCode": "ABC123"},
    )

    assert response.status_code == 200
    assert response.json()["reservationCode"] == reservation.reservation_code


@pytest.mark.asyncio
async def test_find_active_prefers_active_over_cancelled(client: AsyncClient, make_reservation):
    await make_reservation(guest_phone="13800000000", status="cancelled", expected_arrival_date=tomorrow_at(hour=4))
    active = await make_reservation(guest_phone="13800000000", expected_arrival_date=tomorrow_at(hour=11))

    response = await client.get(
        "/reservations/guest",
        params={"date": tomorrow_at().date().isoformat(), "phone": "13800000000"},
    )

    assert response.status_code == 200
    assert response.json()["_id"] == str(active.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["cancelled", "completed"])
async def test_find_active_hides_terminal_reservations(client: AsyncClient, make_reservation, status):
    await make_reservation(guest_phone="13800000000", status=status)

    response = await client.get(
        "/reservations/guest",
        params={"date": tomorrow_at().date().isoformat(), "phone": "13800000000"},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "No active reservation found"


@pytest.mark.asyncio
async def test_find_active_not_found(client: AsyncClient):
    response = await client.get(
        "/reservations/guest",
        params={"date": tomorrow_at().date().isoformat(), "phone": "13800000000"},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Reservation not found"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, detail",
    [
        ({"phone": "13800000000"}, "Date is required"),
        ({"date": "2030-01-01"}, 'Please provide at least one of "phone number" or "reservation code"'),
        ({"date": "01/01/2030", "phone": "13800000000"}, "Invalid date"),
    ],
)
async def test_find_active_validation(client: AsyncClient, params, detail):
    response = await client.get("/reservations/guest", params=params)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_update_reservation(client: AsyncClient, make_reservation):
    reservation = await make_reservation()

    response = await client.patch(
        f"/reservations/guest/{reservation.id}",
        json={"tableSize": 6, "specialRequests": "high chair"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tableSize"] == 6
    assert data["specialRequests"] == "high chair"
    assert data["guestPhone"] == reservation.guest_phone


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["approved", "cancelled", "completed"])
async def test_update_only_while_requested(client: AsyncClient, make_reservation, status):
    reservation = await make_reservation(status=status)

    response = await client.patch(f"/reservations/guest/{reservation.id}", json={"tableSize": 3})

    assert response.status_code == 400
    assert response.json()["detail"] == "Reservation is not in pending status, cannot be updated"


@pytest.mark.asyncio
async def test_update_rejects_past_arrival(client: AsyncClient, make_reservation):
    reservation = await make_reservation()
    past = utcnow() - timedelta(days=1)

    response = await client.patch(
        f"/reservations/guest/{reservation.id}", json={"expectedArrivalDate": iso_utc(past)}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Arrival time must be in the future"


@pytest.mark.asyncio
async def test_update_same_day_skips_conflict_check(client: AsyncClient, make_reservation):
    reservation = await make_reservation(guest_phone="13800000000", expected_arrival_date=tomorrow_at(hour=4))

    response = await client.patch(
        f"/reservations/guest/{reservation.id}",
        json={"expectedArrivalDate": iso_utc(tomorrow_at(hour=11)), "expectedArrivalTime": "dinner"},
    )

    assert response.status_code == 200
    assert response.json()["expectedArrivalTime"] == "dinner"


@pytest.mark.asyncio
async def test_update_moving_onto_booked_day_conflicts(client: AsyncClient, make_reservation):
    await make_reservation(guest_phone="13800000000", expected_arrival_date=tomorrow_at(days=2))
    reservation = await make_reservation(guest_phone="13800000000")

    response = await client.patch(
        f"/reservations/guest/{reservation.id}",
        json={"expectedArrivalDate": iso_utc(tomorrow_at(days=2, hour=12))},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_rejects_invalid_phone(client: AsyncClient, make_reservation):
    reservation = await make_reservation()

    response = await client.patch(f"/reservations/guest/{reservation.id}", json={"guestPhone": "999"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid phone number."


@pytest.mark.asyncio
async def test_update_invalid_id(client: AsyncClient):
    response = await client.patch("/reservations/guest/not-an-id", json={"tableSize": 3})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid reservation ID"


@pytest.mark.asyncio
async def test_update_missing_reservation(client: AsyncClient):
    response = await client.patch(
        "/reservations/guest/00000000-0000-0000-0000-000000000000", json={"tableSize": 3}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cancel_reservation(client: AsyncClient, make_reservation):
    reservation = await make_reservation()

    response = await client.patch(f"/reservations/guest/{reservation.id}/cancel", json={"userId": "guest-1"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancelledBy"] == "guest-1"
    assert data["cancelledAt"] is not None


@pytest.mark.asyncio
async def test_cancel_without_body(client: AsyncClient, make_reservation):
    reservation = await make_reservation(status="approved")

    response = await client.patch(f"/reservations/guest/{reservation.id}/cancel")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, detail",
    [
        ("cancelled", "Reservation is already cancelled"),
        ("completed", "Cannot cancel a completed reservation"),
    ],
)
async def test_cancel_terminal_reservation(client: AsyncClient, make_reservation, status, detail):
    reservation = await make_reservation(status=status)

    response = await client.patch(f"/reservations/guest/{reservation.id}/cancel")

    assert response.status_code == 400
    assert response.json()["detail"] == detail

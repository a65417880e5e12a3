"""
Tests for the owner dashboard and owner reservation listing.
"""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import text

from venue_booking.core.exceptions import StorageUnavailable, Unauthorized
from venue_booking.models.reservation import ReservationStatus
from venue_booking.services.reporting_service import (
    count_by_status,
    count_cancelled,
    dashboard_summary,
    recent_for_owner,
)
from venue_booking.services.reservation_service import create_reservation, transition_reservation
from venue_booking.services.transitions import ReservationAction


@pytest.mark.asyncio
async def test_counters_follow_the_lifecycle(db_session, actor_of, owner, guest, other_guest, venue):
    """
    Cancelled counter counts both cancelled and cancellation_requested, so it
    moves on the request and stays put on approval.
    """
    u1, u2, u3 = actor_of(owner), actor_of(guest), actor_of(other_guest)
    day = date(2025, 6, 1)

    r1 = await create_reservation(db_session, u2, venue.id, day)
    assert await count_by_status(db_session, owner.id, u1, [ReservationStatus.PENDING]) == 1

    await transition_reservation(db_session, r1.id, u1, ReservationAction.REJECT)
    assert await count_by_status(db_session, owner.id, u1, [ReservationStatus.PENDING]) == 0
    assert await count_by_status(db_session, owner.id, u1, [ReservationStatus.REJECTED]) == 1

    r2 = await create_reservation(db_session, u3, venue.id, day)
    await transition_reservation(db_session, r2.id, u1, ReservationAction.ACCEPT)
    await transition_reservation(db_session, r2.id, u1, ReservationAction.CONFIRM)
    assert await count_cancelled(db_session, owner.id, u1) == 0

    await transition_reservation(db_session, r2.id, u3, ReservationAction.REQUEST_CANCELLATION)
    assert await count_cancelled(db_session, owner.id, u1) == 1

    await transition_reservation(db_session, r2.id, u1, ReservationAction.APPROVE_CANCELLATION)
    assert await count_cancelled(db_session, owner.id, u1) == 1
    assert await count_by_status(db_session, owner.id, u1, [ReservationStatus.CANCELLED]) == 1

    summary = await dashboard_summary(db_session, owner.id, u1)
    assert summary["total_reservations"] == 2
    assert summary["pending_reservations"] == 0
    assert summary["cancelled_reservations"] == 1


@pytest.mark.asyncio
async def test_count_by_status_empty_set(db_session, actor_of, owner, venue):
    assert await count_by_status(db_session, owner.id, actor_of(owner), []) == 0


@pytest.mark.asyncio
async def test_counters_scoped_to_owner(db_session, actor_of, owner, stranger, guest, venue, make_venue):
    other_venue = await make_venue(stranger, "Riverside Loft")
    await create_reservation(db_session, actor_of(guest), venue.id, date(2025, 6, 1))
    await create_reservation(db_session, actor_of(guest), other_venue.id, date(2025, 6, 1))

    assert await count_by_status(db_session, owner.id, actor_of(owner), [ReservationStatus.PENDING]) == 1
    assert await count_by_status(db_session, stranger.id, actor_of(stranger), [ReservationStatus.PENDING]) == 1


@pytest.mark.asyncio
async def test_recent_newest_first_with_limit(db_session, actor_of, owner, guest, venue, make_venue):
    second_venue = await make_venue(owner, "Rooftop Terrace")
    guest_actor = actor_of(guest)
    created = []
    for day in (1, 2, 3):
        created.append(await create_reservation(db_session, guest_actor, venue.id, date(2025, 6, day)))
    created.append(await create_reservation(db_session, guest_actor, second_venue.id, date(2025, 6, 1)))

    recent = await recent_for_owner(db_session, owner.id, actor_of(owner), limit=3)
    assert [row["id"] for row in recent] == [r.id for r in reversed(created)][:3]
    assert recent[0]["venue_title"] == "Rooftop Terrace"
    assert recent[0]["requester_username"] == "guest_u2"
    assert recent[0]["requester_email"] == "guest_u2@example.com"


@pytest.mark.asyncio
async def test_dashboard_for_other_owner_forbidden(db_session, actor_of, owner, stranger):
    with pytest.raises(Unauthorized):
        await dashboard_summary(db_session, owner.id, actor_of(stranger))


@pytest.mark.asyncio
async def test_counters_for_other_owner_forbidden(db_session, actor_of, owner, stranger, admin):
    owner_id, outsider = owner.id, actor_of(stranger)
    with pytest.raises(Unauthorized):
        await count_by_status(db_session, owner_id, outsider, [ReservationStatus.PENDING])
    with pytest.raises(Unauthorized):
        await count_cancelled(db_session, owner_id, outsider)
    with pytest.raises(Unauthorized):
        await recent_for_owner(db_session, owner_id, outsider)

    assert await count_cancelled(db_session, owner_id, actor_of(admin)) == 0


@pytest.mark.asyncio
async def test_counters_report_storage_failure(db_session, actor_of, owner):
    """A broken reservations table surfaces as retryable StorageUnavailable."""
    owner_id, owner_actor = owner.id, actor_of(owner)
    await db_session.execute(text("ALTER TABLE reservations RENAME TO reservations_moved"))
    await db_session.commit()

    with pytest.raises(StorageUnavailable) as exc_info:
        await count_by_status(db_session, owner_id, owner_actor, [ReservationStatus.CANCELLED])
    assert exc_info.value.retryable is True

    with pytest.raises(StorageUnavailable):
        await recent_for_owner(db_session, owner_id, owner_actor)


@pytest.mark.asyncio
async def test_dashboard_endpoint(client: AsyncClient, headers_for, owner, guest, venue):
    await client.post(
        "/api/v1/reservations",
        json={"venue_id": venue.id, "event_date": "2025-06-01"},
        headers=headers_for(guest),
    )

    response = await client.get(f"/api/v1/owners/{owner.id}/dashboard", headers=headers_for(owner))
    assert response.status_code == 200
    data = response.json()
    assert data["owner_id"] == owner.id
    assert data["total_reservations"] == 1
    assert data["pending_reservations"] == 1
    assert data["cancelled_reservations"] == 0
    assert len(data["recent"]) == 1
    assert data["recent"][0]["venue_title"] == "Garden Pavilion"


@pytest.mark.asyncio
async def test_dashboard_endpoint_other_owner(client: AsyncClient, headers_for, owner, stranger, admin):
    url = f"/api/v1/owners/{owner.id}/dashboard"
    assert (await client.get(url, headers=headers_for(stranger))).status_code == 403
    assert (await client.get(url, headers=headers_for(admin))).status_code == 200


@pytest.mark.asyncio
async def test_owner_reservations_status_filter(client: AsyncClient, headers_for, owner, guest, venue):
    guest_h, owner_h = headers_for(guest), headers_for(owner)
    ids = []
    for day in ("2025-06-01", "2025-06-02", "2025-06-03"):
        response = await client.post(
            "/api/v1/reservations", json={"venue_id": venue.id, "event_date": day}, headers=guest_h
        )
        ids.append(response.json()["id"])

    await client.post(f"/api/v1/reservations/{ids[0]}/transition", json={"action": "accept"}, headers=owner_h)
    await client.post(f"/api/v1/reservations/{ids[1]}/transition", json={"action": "reject"}, headers=owner_h)

    url = f"/api/v1/owners/{owner.id}/reservations"
    everything = (await client.get(url, headers=owner_h)).json()
    assert [r["id"] for r in everything] == list(reversed(ids))

    filtered = await client.get(url, params=[("status", "accepted"), ("status", "pending")], headers=owner_h)
    assert filtered.status_code == 200
    assert sorted(r["id"] for r in filtered.json()) == [ids[0], ids[2]]

    assert (await client.get(url, params={"status": "bogus"}, headers=owner_h)).status_code == 422

"""
Tests for the venue directory, the open/closed toggle and favorites.
"""

import pytest
from httpx import AsyncClient

from venue_booking.models import VenueStatus

VENUES = "/api/v1/venues"


@pytest.mark.asyncio
async def test_map_lists_open_venues_with_coordinates(client: AsyncClient, owner, venue, closed_venue, make_venue):
    await make_venue(owner, "Unmapped Barn", with_coordinates=False)

    response = await client.get(VENUES)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["cached"] is False
    assert [v["title"] for v in data["venues"]] == ["Garden Pavilion"]


@pytest.mark.asyncio
async def test_map_search_and_sort(client: AsyncClient, owner, make_venue):
    await make_venue(owner, "Harbor Hall", price="300.00")
    await make_venue(owner, "City Hall", price="90.00")
    await make_venue(owner, "Forest Cabin", price="150.00")

    halls = (await client.get(VENUES, params={"q": "HALL"})).json()
    assert halls["total"] == 2
    assert {v["title"] for v in halls["venues"]} == {"Harbor Hall", "City Hall"}

    cheapest = (await client.get(VENUES, params={"sort": "price_asc"})).json()
    assert [v["title"] for v in cheapest["venues"]] == ["City Hall", "Forest Cabin", "Harbor Hall"]

    dearest = (await client.get(VENUES, params={"sort": "price_desc"})).json()
    assert [v["title"] for v in dearest["venues"]][0] == "Harbor Hall"

    # LIKE wildcards are matched literally
    assert (await client.get(VENUES, params={"q": "%"})).json()["total"] == 0


@pytest.mark.asyncio
async def test_get_venue(client: AsyncClient, venue):
    response = await client.get(f"{VENUES}/{venue.id}")
    assert response.status_code == 200
    assert response.json()["status"] == "open"

    assert (await client.get(f"{VENUES}/9999")).status_code == 404


@pytest.mark.asyncio
async def test_owner_toggles_venue_status(client: AsyncClient, headers_for, owner, guest, venue):
    owner_h = headers_for(owner)
    response = await client.patch(f"{VENUES}/{venue.id}/status", json={"status": "closed"}, headers=owner_h)
    assert response.status_code == 200
    assert response.json()["status"] == "closed"

    assert (await client.get(VENUES)).json()["total"] == 0

    # A closed venue refuses new requests
    refused = await client.post(
        "/api/v1/reservations",
        json={"venue_id": venue.id, "event_date": "2025-06-01"},
        headers=headers_for(guest),
    )
    assert refused.json()["code"] == "venue_closed"

    reopened = await client.patch(f"{VENUES}/{venue.id}/status", json={"status": "open"}, headers=owner_h)
    assert reopened.json()["status"] == "open"


@pytest.mark.asyncio
async def test_non_owner_cannot_toggle(client: AsyncClient, headers_for, stranger, admin, venue):
    url = f"{VENUES}/{venue.id}/status"
    assert (await client.patch(url, json={"status": "closed"}, headers=headers_for(stranger))).status_code == 403
    assert (await client.patch(url, json={"status": "closed"}, headers=headers_for(admin))).status_code == 200


@pytest.mark.asyncio
async def test_owner_venue_listing(client: AsyncClient, headers_for, owner, stranger, venue, closed_venue):
    owner_h = headers_for(owner)
    url = f"/api/v1/owners/{owner.id}/venues"

    everything = (await client.get(url, headers=owner_h)).json()
    assert {v["id"] for v in everything} == {venue.id, closed_venue.id}

    only_open = (await client.get(url, params={"status": VenueStatus.OPEN.value}, headers=owner_h)).json()
    assert [v["id"] for v in only_open] == [venue.id]

    assert (await client.get(url, headers=headers_for(stranger))).status_code == 403


@pytest.mark.asyncio
async def test_favorites_are_idempotent(client: AsyncClient, headers_for, guest, owner, venue, make_venue):
    second = await make_venue(owner, "Lakeside Deck")
    guest_h = headers_for(guest)

    await client.put(f"{VENUES}/{venue.id}/favorite", headers=guest_h)
    again = await client.put(f"{VENUES}/{venue.id}/favorite", headers=guest_h)
    assert again.status_code == 200
    assert again.json()["venue_ids"] == [venue.id]

    await client.put(f"{VENUES}/{second.id}/favorite", headers=guest_h)
    listed = await client.get("/api/v1/favorites", headers=guest_h)
    assert listed.json()["venue_ids"] == [second.id, venue.id]

    removed = await client.delete(f"{VENUES}/{venue.id}/favorite", headers=guest_h)
    assert removed.json()["venue_ids"] == [second.id]
    removed_again = await client.delete(f"{VENUES}/{venue.id}/favorite", headers=guest_h)
    assert removed_again.status_code == 200
    assert removed_again.json()["venue_ids"] == [second.id]


@pytest.mark.asyncio
async def test_favorite_unknown_venue(client: AsyncClient, headers_for, guest):
    response = await client.put(f"{VENUES}/9999/favorite", headers=headers_for(guest))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_favorites_require_auth(client: AsyncClient):
    assert (await client.get("/api/v1/favorites")).status_code == 401

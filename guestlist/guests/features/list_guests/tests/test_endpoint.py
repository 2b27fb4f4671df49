import pytest

from guestlist.config.settings import settings
from guestlist.guests.urls import GUEST_STATS_URL, GUEST_URL, GUESTS_URL
from guestlist.main import app


async def create(client, **payload):
    response = await client.post(GUESTS_URL, json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_list_guests_paginates(client):
    for i in range(25):
        await create(client, first_name=f"Guest{i:02d}")

    response = await client.get(GUESTS_URL, params={"page": 3, "limit": 10})

    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == 5
    assert data["meta"] == {"total": 25, "page": 3, "limit": 10, "total_pages": 3}


@pytest.mark.asyncio
async def test_list_guests_filters_and_sorts(client):
    await create(client, first_name="Cat", status="CONFIRMED", city="Austin")
    await create(client, first_name="Ann", status="CONFIRMED", city="Austin")
    await create(client, first_name="Ben", status="DECLINED", city="Austin")

    response = await client.get(
        GUESTS_URL,
        params={"status": "CONFIRMED", "city": "austin", "sort_by": "firstName", "sort_order": "asc"},
    )

    assert response.status_code == 200
    assert [g["first_name"] for g in response.json()["data"]] == ["Ann", "Cat"]


@pytest.mark.asyncio
async def test_list_guests_search(client):
    await create(client, first_name="Alice", last_name="Smith")
    await create(client, first_name="Bob", church="Smithfield Baptist")
    await create(client, first_name="Carol")

    response = await client.get(GUESTS_URL, params={"search": "SMITH"})

    assert sorted(g["first_name"] for g in response.json()["data"]) == ["Alice", "Bob"]


@pytest.mark.asyncio
async def test_list_guests_filters_pastors(client):
    await create(client, first_name="Ann", is_pastor=True)
    await create(client, first_name="Ben")

    response = await client.get(GUESTS_URL, params={"is_pastor": "true"})

    assert [g["first_name"] for g in response.json()["data"]] == ["Ann"]


@pytest.mark.asyncio
async def test_list_guests_rejects_bad_page(client):
    response = await client.get(GUESTS_URL, params={"page": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_reflects_new_guest_after_cached_read(client):
    await create(client, first_name="Ann")
    assert (await client.get(GUESTS_URL)).json()["meta"]["total"] == 1

    await create(client, first_name="Ben")

    assert (await client.get(GUESTS_URL)).json()["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_get_guest_includes_recent_history(client):
    guest = await create(client, first_name="Alice")
    for i in range(12):
        await client.patch(GUEST_URL.format(guest_id=guest["id"]), json={"notes": f"note {i}"})

    response = await client.get(GUEST_URL.format(guest_id=guest["id"]))

    assert response.status_code == 200
    data = response.json()
    assert data["first_name"] == "Alice"
    assert data["notes"] == "note 11"
    assert len(data["history"]) == 10
    assert data["history"][0]["new_value"] == "note 11"
    assert data["history"][0]["action"] == "UPDATE"


@pytest.mark.asyncio
async def test_get_missing_guest_returns_404(client):
    response = await client.get(GUEST_URL.format(guest_id=404))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stats(client):
    await create(client, first_name="Ann", status="CONFIRMED", is_pastor=True)
    await create(client, first_name="Ben", status="DECLINED")
    await create(client, first_name="Cat")

    response = await client.get(GUEST_STATS_URL)

    assert response.status_code == 200
    assert response.json() == {"total": 3, "confirmed": 1, "pending": 1, "declined": 1, "pastors": 1}


def test_guest_routes_live_under_configured_prefix():
    paths = {route.path for route in app.routes}

    assert GUESTS_URL == f"{settings.api_prefix}/guests"
    assert {GUESTS_URL, GUEST_URL, GUEST_STATS_URL} <= paths

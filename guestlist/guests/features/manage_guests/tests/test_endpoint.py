import pytest

from guestlist.guests.urls import GUEST_HISTORY_URL, GUEST_URL, GUESTS_URL


@pytest.mark.asyncio
async def test_create_guest(client):
    """Test creating a guest returns 201 with defaults applied."""
    response = await client.post(
        GUESTS_URL,
        json={"first_name": "Alice", "last_name": "Smith", "church": "Grace Chapel"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["id"] > 0
    assert data["first_name"] == "Alice"
    assert data["last_name"] == "Smith"
    assert data["church"] == "Grace Chapel"
    assert data["status"] == "PENDING"
    assert data["is_pastor"] is False


@pytest.mark.asyncio
async def test_create_duplicate_guest_returns_409(client):
    await client.post(GUESTS_URL, json={"first_name": "Alice", "last_name": "Smith"})

    response = await client.post(GUESTS_URL, json={"first_name": " alice", "last_name": "SMITH"})

    assert response.status_code == 409
    assert response.json()["detail"] == "A guest with this name already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"first_name": ""},
        {"first_name": "Alice", "status": "MAYBE"},
        {"first_name": "Alice", "phone": "1" * 21},
        {"first_name": "A" * 101},
    ],
)
async def test_create_guest_validation(client, payload):
    response = await client.post(GUESTS_URL, json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_whitespace_first_name_returns_422(client):
    response = await client.post(GUESTS_URL, json={"first_name": "   "})

    assert response.status_code == 422
    assert response.json()["detail"] == "First name is required"


@pytest.mark.asyncio
async def test_update_guest_records_changes(client):
    created = (await client.post(GUESTS_URL, json={"first_name": "Alice"})).json()

    response = await client.patch(
        GUEST_URL.format(guest_id=created["id"]),
        json={"status": "CONFIRMED", "city": "Austin"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "CONFIRMED"
    assert data["city"] == "Austin"

    history = (await client.get(GUEST_HISTORY_URL.format(guest_id=created["id"]))).json()
    changes = {(e["field"], e["old_value"], e["new_value"]) for e in history["data"] if e["field"]}
    assert changes == {("status", "PENDING", "CONFIRMED"), ("city", None, "Austin")}


@pytest.mark.asyncio
async def test_update_only_applies_sent_fields(client):
    created = (
        await client.post(GUESTS_URL, json={"first_name": "Alice", "city": "Austin"})
    ).json()

    response = await client.patch(GUEST_URL.format(guest_id=created["id"]), json={"notes": "VIP"})

    assert response.status_code == 200
    assert response.json()["city"] == "Austin"
    assert response.json()["notes"] == "VIP"


@pytest.mark.asyncio
async def test_update_missing_guest_returns_404(client):
    response = await client.patch(GUEST_URL.format(guest_id=404), json={"city": "Austin"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Guest with ID 404 not found"


@pytest.mark.asyncio
async def test_update_with_null_status_returns_422(client):
    created = (await client.post(GUESTS_URL, json={"first_name": "Alice"})).json()

    response = await client.patch(GUEST_URL.format(guest_id=created["id"]), json={"status": None})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_guest(client):
    created = (await client.post(GUESTS_URL, json={"first_name": "Alice"})).json()
    url = GUEST_URL.format(guest_id=created["id"])

    response = await client.delete(url)

    assert response.status_code == 200
    assert response.json() == {"message": "Guest deleted successfully", "id": created["id"]}
    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url)).status_code == 404


@pytest.mark.asyncio
async def test_recreate_after_delete(client):
    created = (await client.post(GUESTS_URL, json={"first_name": "Alice", "last_name": "Smith"})).json()
    await client.delete(GUEST_URL.format(guest_id=created["id"]))

    response = await client.post(GUESTS_URL, json={"first_name": "Alice", "last_name": "Smith"})

    assert response.status_code == 201
    assert response.json()["id"] != created["id"]

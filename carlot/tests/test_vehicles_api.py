import pytest
from unittest.mock import AsyncMock, patch

from carlot.store.backend import BackendStore, StoreError


@pytest.mark.asyncio
async def test_create_vehicle_returns_stored_record(async_client, seller, seller_headers, vehicle_payload):
    resp = await async_client.post("/api/vehicles", json=vehicle_payload, headers=seller_headers)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["id"]
    assert data["make"] == "Toyota"
    assert data["status"] == "pending"
    assert data["title_status"] == "absent"
    assert data["created_by"] == seller["id"]


@pytest.mark.asyncio
async def test_create_vehicle_with_capitalized_enums_is_rejected(async_client, seller_headers):
    payload = {
        "make": "Test Make",
        "model": "Test Model",
        "year": 2023,
        "vin": "TEST1234567890123",
        "status": "Pending",
        "title_status": "Absent",
    }

    resp = await async_client.post("/api/vehicles", json=payload, headers=seller_headers)

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Validation failed"
    fields = {f["field"] for f in body["fields"]}
    assert {"status", "title_status"} <= fields


@pytest.mark.asyncio
async def test_create_vehicle_rejects_non_object_body(async_client, seller_headers):
    resp = await async_client.post("/api/vehicles", json=["Toyota"], headers=seller_headers)

    assert resp.status_code == 422
    assert resp.json()["fields"] == [{"field": "payload", "message": "Expected an object"}]


@pytest.mark.asyncio
async def test_create_vehicle_requires_session(async_client, vehicle_payload):
    resp = await async_client.post("/api/vehicles", json=vehicle_payload)

    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_transporter_cannot_create_vehicles(async_client, transporter_headers, vehicle_payload):
    resp = await async_client.post("/api/vehicles", json=vehicle_payload, headers=transporter_headers)

    assert resp.status_code == 403
    assert "create:vehicles" in resp.json()["error"]


@pytest.mark.asyncio
async def test_api_key_is_required(async_client, seller_headers, vehicle_payload):
    resp = await async_client.post(
        "/api/vehicles",
        json=vehicle_payload,
        headers={**seller_headers, "apikey": "wrong"},
    )

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid API key"}


@pytest.mark.asyncio
async def test_store_failure_returns_generic_error(async_client, seller_headers, vehicle_payload):
    with patch.object(BackendStore, "insert", AsyncMock(side_effect=StoreError("disk full"))):
        resp = await async_client.post("/api/vehicles", json=vehicle_payload, headers=seller_headers)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to create vehicle"}


@pytest.mark.asyncio
async def test_update_vehicle_partially(async_client, admin_headers, vehicle):
    resp = await async_client.patch(
        f"/api/vehicles/{vehicle['id']}",
        json={"status": "sold", "sale_date": "2024-05-02"},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "sold"
    assert data["sale_date"] == "2024-05-02"
    assert data["make"] == vehicle["make"]


@pytest.mark.asyncio
async def test_seller_cannot_edit_vehicles(async_client, seller_headers, vehicle):
    resp = await async_client.patch(f"/api/vehicles/{vehicle['id']}", json={"status": "sold"}, headers=seller_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_update_missing_vehicle_is_404(async_client, admin_headers):
    resp = await async_client.patch("/api/vehicles/nope", json={"status": "sold"}, headers=admin_headers)

    assert resp.status_code == 404
    assert resp.json() == {"error": "Vehicle not found"}


@pytest.mark.asyncio
async def test_update_with_empty_body_is_422(async_client, admin_headers, vehicle):
    resp = await async_client.patch(f"/api/vehicles/{vehicle['id']}", json={}, headers=admin_headers)

    assert resp.status_code == 422
    assert resp.json()["fields"][0]["field"] == "payload"


@pytest.mark.asyncio
async def test_list_vehicles_filters_and_paginates(async_client, store, seller, transporter_headers, vehicle_payload):
    for i, make in enumerate(["Toyota", "Honda", "Toyota"]):
        await store.insert("vehicles", {**vehicle_payload, "make": make, "model": f"Model {i}", "created_by": seller["id"]})

    resp = await async_client.get("/api/vehicles", params={"make": "Toyota", "limit": 1}, headers=transporter_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "total_pages": 2}


@pytest.mark.asyncio
async def test_search_vehicles_case_insensitively(async_client, vehicle, seller_headers):
    resp = await async_client.get("/api/vehicles", params={"search": "camr"}, headers=seller_headers)
    assert [v["id"] for v in resp.json()["data"]] == [vehicle["id"]]


@pytest.mark.asyncio
async def test_get_vehicle(async_client, vehicle, seller_headers):
    resp = await async_client.get(f"/api/vehicles/{vehicle['id']}", headers=seller_headers)
    assert resp.json()["data"]["vin"] == vehicle["vin"]

    missing = await async_client.get("/api/vehicles/unknown", headers=seller_headers)
    assert missing.status_code == 404

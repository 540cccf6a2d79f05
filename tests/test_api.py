"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database and an in-process height source; the
transition engine is injected through ``create_app``.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import CONTRACT, OPERATOR, OWNER, PASSENGER, STRANGER


def _as(caller: str) -> dict[str, str]:
    return {"X-Caller-Identity": caller}


RIDE = {"start_location": "Terminal 2", "end_location": "Andheri", "distance": 10}


async def _register(client: AsyncClient, owner: str = OWNER) -> int:
    resp = await client.post("/api/v1/vehicles", headers=_as(owner))
    assert resp.status_code == 201
    return resp.json()["value"]


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_register_vehicle_returns_tagged_id(client: AsyncClient):
    resp = await client.post("/api/v1/vehicles", headers=_as(OWNER))
    assert resp.status_code == 201
    assert resp.json() == {"type": "ok", "value": 1}

    vehicle = (await client.get("/api/v1/vehicles/1")).json()
    assert vehicle["owner"] == OWNER
    assert vehicle["status"] == "AVAILABLE"
    assert vehicle["mileage"] == 0
    assert vehicle["earnings"] == 0


@pytest.mark.asyncio
async def test_caller_identity_is_required(client: AsyncClient):
    resp = await client.post("/api/v1/vehicles")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_vehicle_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/vehicles/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_ride_lifecycle(client: AsyncClient):
    await _register(client)

    resp = await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))
    assert resp.status_code == 201
    assert resp.json() == {"type": "ok", "value": 1}

    ride = (await client.get("/api/v1/rides/1")).json()
    assert ride["fare"] == 100
    assert ride["status"] == "IN_PROGRESS"
    assert ride["vehicle_id"] == 1
    assert (await client.get("/api/v1/vehicles/1")).json()["status"] == "OCCUPIED"

    resp = await client.post("/api/v1/rides/1/complete", headers=_as(OWNER))
    assert resp.status_code == 200
    assert resp.json() == {"type": "ok", "value": True}

    vehicle = (await client.get("/api/v1/vehicles/1")).json()
    assert vehicle["status"] == "AVAILABLE"
    assert vehicle["mileage"] == 10
    assert vehicle["earnings"] == 100


@pytest.mark.asyncio
async def test_request_ride_without_vehicles(client: AsyncClient):
    resp = await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))
    assert resp.status_code == 404
    body = resp.json()
    assert body["type"] == "err"
    assert body["value"] == "u101"

    stats = (await client.get("/api/v1/admin/stats")).json()
    assert stats["last_ride_id"] == 0


@pytest.mark.asyncio
async def test_request_ride_location_too_long(client: AsyncClient):
    await _register(client)
    body = {**RIDE, "start_location": "x" * 51}
    resp = await client.post("/api/v1/rides", json=body, headers=_as(PASSENGER))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_request_ride_idempotency_key(client: AsyncClient):
    await _register(client)
    body = {**RIDE, "idempotency_key": "unique-key-123"}
    resp1 = await client.post("/api/v1/rides", json=body, headers=_as(PASSENGER))
    resp2 = await client.post("/api/v1/rides", json=body, headers=_as(PASSENGER))
    assert resp1.status_code == 201
    assert resp2.status_code == 201
    assert resp1.json()["value"] == resp2.json()["value"]


@pytest.mark.asyncio
async def test_complete_ride_by_stranger_is_forbidden(client: AsyncClient):
    await _register(client)
    await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))

    resp = await client.post("/api/v1/rides/1/complete", headers=_as(STRANGER))
    assert resp.status_code == 403
    assert resp.json()["value"] == "u102"


@pytest.mark.asyncio
async def test_complete_ride_twice_conflicts(client: AsyncClient):
    await _register(client)
    await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))
    await client.post("/api/v1/rides/1/complete", headers=_as(OWNER))

    resp = await client.post("/api/v1/rides/1/complete", headers=_as(OWNER))
    assert resp.status_code == 409
    assert resp.json()["value"] == "u104"


@pytest.mark.asyncio
async def test_get_ride_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/rides/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_maintenance_gated_by_height(client: AsyncClient):
    await _register(client)

    schedule = (await client.get("/api/v1/vehicles/1/maintenance-schedule")).json()
    assert schedule["next_maintenance_height"] == 10_000

    resp = await client.post(
        "/api/v1/vehicles/1/maintenance/schedule", headers=_as(OWNER)
    )
    assert resp.status_code == 409

    resp = await client.put("/api/v1/admin/height", json={"height": 10_000})
    assert resp.json()["height"] == 10_000

    resp = await client.post(
        "/api/v1/vehicles/1/maintenance/schedule", headers=_as(OWNER)
    )
    assert resp.status_code == 200
    assert (await client.get("/api/v1/vehicles/1")).json()["status"] == "MAINTENANCE"

    resp = await client.post(
        "/api/v1/vehicles/1/maintenance/complete", headers=_as(OWNER)
    )
    assert resp.status_code == 200
    assert (await client.get("/api/v1/vehicles/1")).json()["status"] == "AVAILABLE"


@pytest.mark.asyncio
async def test_height_never_moves_backwards(client: AsyncClient):
    await client.put("/api/v1/admin/height", json={"height": 500})
    resp = await client.put("/api/v1/admin/height", json={"height": 100})
    assert resp.json()["height"] == 500


@pytest.mark.asyncio
async def test_distribute_earnings(client: AsyncClient):
    await client.post(f"/api/v1/admin/accounts/{CONTRACT}/deposit", json={"amount": 1_000})
    await _register(client)
    await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))
    await client.post("/api/v1/rides/1/complete", headers=_as(OWNER))

    resp = await client.post(
        "/api/v1/vehicles/1/earnings/distribute", headers=_as(OWNER)
    )
    assert resp.status_code == 200
    assert (await client.get("/api/v1/vehicles/1")).json()["earnings"] == 0
    assert (await client.get(f"/api/v1/admin/accounts/{OWNER}")).json()["balance"] == 80
    assert (await client.get(f"/api/v1/admin/accounts/{OPERATOR}")).json()["balance"] == 20


@pytest.mark.asyncio
async def test_distribute_earnings_unfunded_contract(client: AsyncClient):
    await _register(client)
    await client.post("/api/v1/rides", json=RIDE, headers=_as(PASSENGER))
    await client.post("/api/v1/rides/1/complete", headers=_as(OWNER))

    resp = await client.post(
        "/api/v1/vehicles/1/earnings/distribute", headers=_as(OWNER)
    )
    assert resp.status_code == 502
    assert resp.json()["value"] == "u105"
    assert (await client.get("/api/v1/vehicles/1")).json()["earnings"] == 100


@pytest.mark.asyncio
async def test_distribute_earnings_by_stranger(client: AsyncClient):
    await _register(client)
    resp = await client.post(
        "/api/v1/vehicles/1/earnings/distribute", headers=_as(STRANGER)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_request_ride_negative_distance(client: AsyncClient):
    await _register(client)
    body = {**RIDE, "distance": -5}
    resp = await client.post("/api/v1/rides", json=body, headers=_as(PASSENGER))
    assert resp.status_code == 422
    assert resp.json() == {
        "type": "err",
        "value": "u106",
        "detail": "Distance must not be negative, got -5",
    }
    assert (await client.get("/api/v1/vehicles/1")).json()["status"] == "AVAILABLE"


@pytest.mark.asyncio
async def test_request_ride_empty_idempotency_key(client: AsyncClient):
    await _register(client)
    body = {**RIDE, "idempotency_key": ""}
    resp = await client.post("/api/v1/rides", json=body, headers=_as(PASSENGER))
    assert resp.status_code == 422

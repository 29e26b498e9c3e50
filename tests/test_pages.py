"""Tests for the admin-curated page catalog."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_normalizes_tag(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        "/api/v1/pages", json={"tag": "#Bri_Free/OFTV", "label": " Bri Free / OFTV "},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    page = resp.json()
    assert page["tag"] == "brifreeoftv"
    assert page["label"] == "Bri Free / OFTV"
    assert page["is_active"] is True


@pytest.mark.asyncio
async def test_recreate_relabels_and_reactivates(async_client: AsyncClient, admin_headers):
    await async_client.post("/api/v1/pages", json={"tag": "claire", "label": "Claire"}, headers=admin_headers)
    await async_client.patch("/api/v1/pages/claire", json={"is_active": False}, headers=admin_headers)

    resp = await async_client.post(
        "/api/v1/pages", json={"tag": "#Claire", "label": "Claire V2"}, headers=admin_headers
    )
    assert resp.json()["is_active"] is True
    assert resp.json()["label"] == "Claire V2"

    rows = (await async_client.get("/api/v1/pages", headers=admin_headers)).json()["rows"]
    assert len(rows) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"tag": "#x", "label": "Too short"}, {"tag": "sarahc", "label": "  "}])
async def test_create_rejects_invalid_input(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post("/api/v1/pages", json=body, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"


@pytest.mark.asyncio
async def test_list_is_sorted_by_tag(async_client: AsyncClient, admin_headers, manager_headers):
    for tag in ("sarahc", "ashley", "livv"):
        await async_client.post("/api/v1/pages", json={"tag": tag, "label": tag.title()}, headers=admin_headers)

    resp = await async_client.get("/api/v1/pages", headers=manager_headers)
    assert resp.status_code == 200
    assert [r["tag"] for r in resp.json()["rows"]] == ["ashley", "livv", "sarahc"]


@pytest.mark.asyncio
async def test_patch_updates_only_given_fields(async_client: AsyncClient, admin_headers):
    await async_client.post("/api/v1/pages", json={"tag": "livv", "label": "Livv"}, headers=admin_headers)

    resp = await async_client.patch("/api/v1/pages/livv", json={"label": "Livv Main"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["label"] == "Livv Main"
    assert resp.json()["is_active"] is True

    resp = await async_client.patch("/api/v1/pages/livv", json={}, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_patch_and_delete_unknown_page(async_client: AsyncClient, admin_headers):
    resp = await async_client.patch("/api/v1/pages/nothere", json={"label": "X"}, headers=admin_headers)
    assert resp.status_code == 404
    resp = await async_client.delete("/api/v1/pages/nothere", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_page(async_client: AsyncClient, admin_headers):
    await async_client.post("/api/v1/pages", json={"tag": "ashley", "label": "Ashley"}, headers=admin_headers)
    resp = await async_client.delete("/api/v1/pages/%23Ashley", headers=admin_headers)
    assert resp.status_code == 200
    rows = (await async_client.get("/api/v1/pages", headers=admin_headers)).json()["rows"]
    assert rows == []


@pytest.mark.asyncio
async def test_mutations_require_admin(async_client: AsyncClient, manager_headers):
    resp = await async_client.post(
        "/api/v1/pages", json={"tag": "ashley", "label": "Ashley"}, headers=manager_headers
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    resp = await async_client.delete("/api/v1/pages/ashley", headers=manager_headers)
    assert resp.status_code == 403

"""
Tests for the administrative API.
"""

import pytest
from httpx import AsyncClient, ASGITransport

from tenantflags.core.features import Feature, MemoryFeatureStore, StorageError

API = "/tenantflags/api"


@pytest.mark.asyncio
async def test_list_feature_flags_with_tenant_states(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode", enabled=False), Feature(id="checkout-v2", enabled=True)])
    await memory_store.upsert_tenant_state("acme", "dark-mode", True)

    response = await client.get(f"{API}/feature-flags")

    assert response.status_code == 200
    data = response.json()
    assert [item["feature"]["id"] for item in data] == ["checkout-v2", "dark-mode"]
    dark_mode = data[1]
    assert dark_mode["feature"]["enabled"] is False
    assert dark_mode["tenantStates"] == [
        {
            "tenantId": "acme",
            "featureId": "dark-mode",
            "enabled": True,
            "updatedAt": dark_mode["tenantStates"][0]["updatedAt"],
        }
    ]


@pytest.mark.asyncio
async def test_get_feature_flag(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode", enabled=True)])

    response = await client.get(f"{API}/feature-flags/dark-mode")

    assert response.status_code == 200
    data = response.json()
    assert data["feature"]["id"] == "dark-mode"
    assert data["feature"]["enabled"] is True
    assert data["tenantStates"] == []


@pytest.mark.asyncio
async def test_get_missing_feature_flag_returns_404(client: AsyncClient):
    response = await client.get(f"{API}/feature-flags/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_available_ids_and_bulk_create(client: AsyncClient):
    response = await client.get(f"{API}/available-ids")
    assert response.json() == ["checkout-v2", "dark-mode"]

    response = await client.post(f"{API}/management/bulk-create-missing")
    assert response.status_code == 200
    assert response.json() == {"created": ["checkout-v2", "dark-mode"]}

    response = await client.get(f"{API}/available-ids")
    assert response.json() == []

    response = await client.post(f"{API}/management/bulk-create-missing")
    assert response.json() == {"created": []}


@pytest.mark.asyncio
async def test_patch_global_enablement(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode", enabled=False)])

    response = await client.patch(
        f"{API}/feature-flags/dark-mode",
        params={"enabled": "true"},
    )

    assert response.status_code == 200
    assert response.json()["feature"]["enabled"] is True
    assert (await memory_store.get_feature("dark-mode")).enabled is True


@pytest.mark.asyncio
async def test_patch_tenant_override_and_remove(client: AsyncClient, memory_store):
    """Override for acme only, then delete it to fall back to the global value."""
    memory_store.seed([Feature(id="dark-mode", enabled=False)])

    response = await client.patch(
        f"{API}/feature-flags/dark-mode",
        params={"tenantId": "acme", "enabled": "true"},
    )
    assert response.status_code == 200
    assert response.json()["tenantStates"][0]["tenantId"] == "acme"

    acme = await client.get(f"{API}/feature-flags/dark-mode/evaluate", params={"tenantId": "acme"})
    globex = await client.get(f"{API}/feature-flags/dark-mode/evaluate", params={"tenantId": "globex"})
    assert acme.json()["enabled"] is True
    assert acme.json()["reason"] == "Tenant override"
    assert globex.json()["enabled"] is False

    response = await client.delete(f"{API}/tenants/acme/overrides/dark-mode")
    assert response.status_code == 204

    acme = await client.get(f"{API}/feature-flags/dark-mode/evaluate", params={"tenantId": "acme"})
    assert acme.json()["enabled"] is False


@pytest.mark.asyncio
async def test_delete_missing_override_is_noop(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode")])

    response = await client.delete(f"{API}/tenants/acme/overrides/dark-mode")

    assert response.status_code == 204


@pytest.mark.asyncio
async def test_patch_override_for_missing_feature_returns_404(client: AsyncClient, memory_store):
    response = await client.patch(
        f"{API}/feature-flags/missing",
        params={"tenantId": "acme", "enabled": "true"},
    )

    assert response.status_code == 404
    assert await memory_store.get_tenant_state("acme", "missing") is None


@pytest.mark.asyncio
async def test_patch_override_for_unknown_tenant_returns_404(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode")])

    response = await client.patch(
        f"{API}/feature-flags/dark-mode",
        params={"tenantId": "initech", "enabled": "true"},
    )

    assert response.status_code == 404
    assert "initech" in response.json()["message"]


@pytest.mark.asyncio
async def test_patch_requires_enabled(client: AsyncClient, memory_store):
    memory_store.seed([Feature(id="dark-mode")])

    response = await client.patch(f"{API}/feature-flags/dark-mode")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_blank_feature_id_returns_400(client: AsyncClient):
    response = await client.patch(f"{API}/feature-flags/%20", params={"enabled": "true"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_list_tenants(client: AsyncClient):
    response = await client.get(f"{API}/tenants")

    assert response.status_code == 200
    assert sorted(t["id"] for t in response.json()) == ["acme", "globex"]


@pytest.mark.asyncio
async def test_unknown_route_falls_back_to_404(client: AsyncClient):
    response = await client.get(f"{API}/does/not/exist")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_storage_failure_returns_503(client: AsyncClient, monkeypatch):
    async def broken(self):
        raise StorageError("Feature store operation 'list_features' failed")

    monkeypatch.setattr(MemoryFeatureStore, "list_features", broken)

    response = await client.get(f"{API}/feature-flags")

    assert response.status_code == 503
    assert response.json()["error"] == "storage_error"


@pytest.mark.asyncio
async def test_dashboard_disabled_hides_api(make_app):
    app = make_app(enable_dashboard=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get(f"{API}/feature-flags")
        health = await client.get("/health")

    assert response.status_code == 404
    assert health.status_code == 200


@pytest.mark.asyncio
async def test_custom_dashboard_path(make_app, memory_store):
    memory_store.seed([Feature(id="dark-mode")])
    app = make_app(path="/admin/flags")
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/admin/flags/api/feature-flags/dark-mode")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"

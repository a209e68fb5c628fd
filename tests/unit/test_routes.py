"""HTTP route tests against the FastAPI app with in-memory dependencies."""

from collections.abc import AsyncIterator

import httpx
import pytest

from main import app
from src.core.config import settings
from src.core.infrastructure.background import BackgroundTaskQueue
from src.core.infrastructure.security.jwt import create_access_token
from src.modules.aggregation.application import dependencies as aggregation_app_deps
from src.modules.aggregation.application.service import (
    AggregateFeedService,
    AggregationService,
)
from src.modules.sources.application import dependencies as sources_app_deps
from src.modules.sources.application.services import SourceCatalogService
from src.modules.sources.domain.getter import GetterRegistry
from src.modules.users.application import dependencies as users_app_deps

pytestmark = pytest.mark.anyio


class EmptyCacheStore:
    async def get_entries(self, source_ids):
        return {}

    async def set(self, source_id, items, updated):
        return None


class UnusedProvider:
    async def load_catalog(self):
        raise AssertionError("catalog refresh is not expected in route tests")


@pytest.fixture
async def client(catalog, item_factory, user_record_repository) -> AsyncIterator[httpx.AsyncClient]:
    async def fetch_x(force_fresh: bool):
        return [item_factory("a", pub_date=1_700_000_000_000)]

    async def fetch_y(force_fresh: bool):
        return [item_factory("b", pub_date=1_700_000_100_000)]

    getters = GetterRegistry({"x": fetch_x, "y": fetch_y})
    background = BackgroundTaskQueue("test-cache-write")
    feed_service = AggregateFeedService(
        lambda: AggregationService(catalog, getters, EmptyCacheStore(), background),
        None,
    )
    catalog_service = SourceCatalogService(
        UnusedProvider(), lambda _: getters, initial=catalog
    )

    async def get_repository():
        return user_record_repository

    async def get_feed_service():
        return feed_service

    async def get_catalog_service():
        return catalog_service

    overrides = {
        users_app_deps.get_user_record_repository: get_repository,
        aggregation_app_deps.get_aggregate_feed_service: get_feed_service,
        sources_app_deps.get_source_catalog_service: get_catalog_service,
    }
    saved = {key: app.dependency_overrides.get(key) for key in overrides}
    app.dependency_overrides.update(overrides)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    await background.drain()
    for key, value in saved.items():
        if value is None:
            app.dependency_overrides.pop(key, None)
        else:
            app.dependency_overrides[key] = value


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-1')}"}


class TestAggregateRoute:
    async def test_merged_feed(self, client) -> None:
        response = await client.get("/api/s/aggregate", params={"sourceIds": "x,y"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["sourceIds"] == ["x", "y"]
        assert [item["id"] for item in body["items"]] == ["b", "a"]
        assert body["items"][0]["originalSourceId"] == "y"
        assert body["total"] == 2

    @pytest.mark.parametrize("params", [{}, {"sourceIds": ""}, {"sourceIds": "nope"}])
    async def test_no_valid_sources(self, client, params) -> None:
        response = await client.get("/api/s/aggregate", params=params)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_VALID_SOURCES"

    async def test_forced_refresh_may_require_auth(self, client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "AGGREGATE_FORCE_REQUIRES_AUTH", True)

        response = await client.get(
            "/api/s/aggregate", params={"sourceIds": "x", "latest": "true"}
        )

        assert response.status_code == 401

    async def test_invalid_token_is_rejected(self, client) -> None:
        response = await client.get(
            "/api/s/aggregate",
            params={"sourceIds": "x"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401


async def test_catalog(client) -> None:
    response = await client.get("/api/sources")

    assert response.status_code == 200
    body = response.json()
    assert body["fixedColumns"] == ["focus", "hottest", "realtime", "tech", "world"]
    assert body["defaults"]["tech"] == ["x", "y"]
    assert {source["id"] for source in body["sources"]} == {"x", "y", "z"}
    assert body["loadedFrom"] == "snapshot"


class TestSyncRoutes:
    async def test_requires_auth(self, client) -> None:
        response = await client.get("/api/me/sync")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_REQUIRED"

    async def test_pull_defaults(self, client, auth_headers) -> None:
        response = await client.get("/api/me/sync", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "data": None,
            "updatedTime": 0,
            "aggregatedViews": [],
            "pinnedColumns": [],
        }

    async def test_push_then_pull(self, client, auth_headers) -> None:
        pushed = await client.post(
            "/api/me/sync",
            headers=auth_headers,
            json={"data": {"tech": ["x"]}, "updatedTime": 200, "pinnedColumns": ["tech"]},
        )
        pulled = await client.get("/api/me/sync", headers=auth_headers)

        assert pushed.status_code == 200
        assert pushed.json() == {"success": True, "updatedTime": 200}
        assert pulled.json()["data"] == {"tech": ["x"]}
        assert pulled.json()["pinnedColumns"] == ["tech"]

    async def test_invalid_push(self, client, auth_headers) -> None:
        response = await client.post(
            "/api/me/sync", headers=auth_headers, json={"data": "nope"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid data format"

    async def test_disabled(self, client, auth_headers, monkeypatch) -> None:
        monkeypatch.setattr(settings, "SYNC_ENABLED", False)

        response = await client.get("/api/me/sync", headers=auth_headers)

        assert response.status_code == settings.SYNC_NOT_PROVISIONED_STATUS
        assert settings.SYNC_NOT_PROVISIONED_MARKER in response.text


class TestViewRoutes:
    async def test_crud(self, client, auth_headers) -> None:
        created = await client.post(
            "/api/me/aggregated-views",
            headers=auth_headers,
            json={"name": "Morning", "sources": ["x", "y"]},
        )
        assert created.status_code == 200
        body = created.json()
        assert body["success"] is True
        view_id = body["config"]["id"]
        assert body["config"]["name"] == "Morning"
        assert "createdAt" in body["config"]

        listed = await client.get("/api/me/aggregated-views", headers=auth_headers)
        assert [view["id"] for view in listed.json()] == [view_id]

        updated = await client.put(
            f"/api/me/aggregated-views/{view_id}",
            headers=auth_headers,
            json={"sources": ["z"]},
        )
        assert updated.json()["config"]["sources"] == ["z"]

        deleted = await client.delete(
            f"/api/me/aggregated-views/{view_id}", headers=auth_headers
        )
        assert deleted.json() == {"success": True, "message": "聚合视图配置已成功删除"}

        missing = await client.get(
            f"/api/me/aggregated-views/{view_id}", headers=auth_headers
        )
        assert missing.status_code == 404

    async def test_conflict(self, client, auth_headers) -> None:
        payload = {"name": "Morning", "sources": ["x"]}
        await client.post("/api/me/aggregated-views", headers=auth_headers, json=payload)

        response = await client.post(
            "/api/me/aggregated-views", headers=auth_headers, json=payload
        )

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "已存在同名的聚合视图配置"

    async def test_validation(self, client, auth_headers) -> None:
        response = await client.post(
            "/api/me/aggregated-views",
            headers=auth_headers,
            json={"name": "", "sources": []},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "名称不能为空, 至少需要选择一个新闻源"

    async def test_update_unknown(self, client, auth_headers) -> None:
        response = await client.put(
            "/api/me/aggregated-views/missing",
            headers=auth_headers,
            json={"name": "x"},
        )

        assert response.status_code == 404

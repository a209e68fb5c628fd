"""Tests for the client composition root."""

import asyncio

import httpx
import pytest

from src.modules.preferences.application.credentials import CREDENTIAL_STORAGE_KEY
from src.modules.preferences.infrastructure.client import open_client_session

pytestmark = pytest.mark.anyio

BASE_URL = "http://api.test/api"


class FakeServer:
    """Routes ``/me/sync`` and ``/s/aggregate`` requests."""

    def __init__(self, remote: dict | None = None) -> None:
        self.remote = remote or {"data": None, "updatedTime": 0}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/me/sync":
            return httpx.Response(200, json=self.remote)
        if request.url.path == "/api/s/aggregate":
            ids = request.url.params["sourceIds"].split(",")
            return httpx.Response(
                200,
                json={
                    "status": "success",
                    "sourceIds": ids,
                    "updatedTime": 1,
                    "items": [],
                    "total": 0,
                },
            )
        return httpx.Response(404)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


async def test_session_without_credential_stays_local(catalog, memory_storage) -> None:
    server = FakeServer()
    session = open_client_session(
        catalog,
        storage=memory_storage,
        base_url=BASE_URL,
        transport=httpx.MockTransport(server),
    )

    feed = await session.load_category_feed("tech")
    await session.close()

    assert feed.source_ids == ["x", "y"]
    assert server.paths() == ["/api/s/aggregate"]
    assert session.store.read().data["tech"] == ["x", "y"]


async def test_session_pulls_on_open(catalog, memory_storage) -> None:
    memory_storage.values[CREDENTIAL_STORAGE_KEY] = "token-1"
    server = FakeServer({"data": {"focus": ["z"]}, "updatedTime": 10})

    session = open_client_session(
        catalog,
        storage=memory_storage,
        base_url=BASE_URL,
        transport=httpx.MockTransport(server),
    )
    await asyncio.sleep(0.05)

    assert session.store.read().data["focus"] == ["z"]
    assert server.requests[0].headers["Authorization"] == "Bearer token-1"
    await session.close()


async def test_active_view_feed(catalog, memory_storage) -> None:
    server = FakeServer()
    session = open_client_session(
        catalog,
        storage=memory_storage,
        base_url=BASE_URL,
        transport=httpx.MockTransport(server),
    )

    assert await session.load_active_view_feed() is None

    view = session.views.create("Morning", ["z", "x"])
    session.views.select(view.id)
    feed = await session.load_active_view_feed()
    await session.close()

    assert feed is not None
    assert feed.source_ids == ["z", "x"]

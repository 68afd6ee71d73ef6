from __future__ import annotations

import json

import pytest
import pytest_asyncio
import requests
from aiohttp import web
from aiohttp.test_utils import TestServer

from nextcloud_analytics import SyncClient
from nextcloud_analytics.settings import get_settings

BASE_URL = "https://cloud.example.com/nextcloud"
ROUTE = "/apps/analytics/api/1.0/adddata/{collection}"


class RecordingAdapter(requests.adapters.BaseAdapter):
    """Answers every request with a canned response and keeps what was sent."""

    def __init__(self, status: int = 200, body: str = '{"success": true}') -> None:
        super().__init__()
        self.status = status
        self.body = body
        self.requests: list[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        resp = requests.Response()
        resp.status_code = self.status
        resp._content = self.body.encode("utf-8")
        resp.encoding = "utf-8"
        resp.url = request.url
        resp.request = request
        return resp

    def close(self) -> None:
        pass

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].body.decode("utf-8"))


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_adapter():
    return RecordingAdapter


@pytest.fixture
def adapter(make_adapter) -> RecordingAdapter:
    return make_adapter()


@pytest.fixture
def sync_client(adapter):
    client = SyncClient(BASE_URL, 42, "myself", "hunter2")
    client.session.mount("https://", adapter)
    yield client
    client.close()


class AnalyticsStub:
    def __init__(self) -> None:
        self.status = 200
        self.body = '{"success": true}'
        self.received: list[dict] = []

    async def handler(self, request: web.Request) -> web.Response:
        self.received.append({
            "path": request.path,
            "collection": request.match_info["collection"],
            "headers": request.headers.copy(),
            "body": await request.text(),
        })
        return web.Response(status=self.status, text=self.body)


@pytest_asyncio.fixture
async def analytics_server():
    stub = AnalyticsStub()
    app = web.Application()
    app.router.add_post("/nextcloud" + ROUTE, stub.handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server, stub
    finally:
        await server.close()

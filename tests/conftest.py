import json

import httpx
import pytest
from fastapi.testclient import TestClient

from relay.main import app


class FakeNotion:
    """Stand-in for the Notion API: canned responses keyed by (method, path)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, body=None, status=200):
        self.routes[(method, path)] = (status, body if body is not None else {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/v1/", 1)[-1]
        payload = json.loads(request.content) if request.content else None
        self.calls.append(
            {
                "method": request.method,
                "path": path,
                "json": payload,
                "params": dict(request.url.params),
                "headers": request.headers,
            }
        )
        status, body = self.routes.get(
            (request.method, path),
            (404, {"object": "error", "status": 404, "code": "object_not_found", "message": "not found"}),
        )
        return httpx.Response(status, json=body)

    def methods(self):
        return [(c["method"], c["path"]) for c in self.calls]


@pytest.fixture
def notion():
    fake = FakeNotion()
    app.state.notion_transport = httpx.MockTransport(fake)
    yield fake
    app.state.notion_transport = None


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def headers():
    return {"notion-token": "secret_abc"}

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from modules.common import ratelimit
from modules.common.ratelimit import RateLimitMiddleware


@pytest.fixture
def clock(monkeypatch):
    now = {"t": 1_000_000.0}
    monkeypatch.setattr(ratelimit, "time", SimpleNamespace(time=lambda: now["t"]))
    return now


@pytest.fixture
def limited():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=3, window_seconds=60)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    @app.get("/health")
    def health():
        return {"status": "OK"}

    return TestClient(app)


def test_requests_over_the_limit_get_429(limited, clock):
    remaining = [limited.get("/api/ping").headers["X-RateLimit-Remaining"] for _ in range(3)]
    assert remaining == ["2", "1", "0"]

    res = limited.get("/api/ping")
    assert res.status_code == 429
    assert res.json() == {"message": ratelimit.TOO_MANY_REQUESTS}
    assert res.headers["Retry-After"] == "60"


def test_window_resets(limited, clock):
    for _ in range(4):
        limited.get("/api/ping")
    clock["t"] += 61
    assert limited.get("/api/ping").status_code == 200


def test_only_api_paths_are_counted(limited, clock):
    for _ in range(5):
        assert limited.get("/health").status_code == 200
    assert limited.get("/api/ping").status_code == 200


def test_clients_are_counted_separately(clock, monkeypatch):
    monkeypatch.setattr(RateLimitMiddleware, "client_key", staticmethod(lambda request: request.headers["X-Client"]))
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=1, window_seconds=60)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    client = TestClient(app)
    assert client.get("/api/ping", headers={"X-Client": "10.0.0.1"}).status_code == 200
    assert client.get("/api/ping", headers={"X-Client": "10.0.0.1"}).status_code == 429
    assert client.get("/api/ping", headers={"X-Client": "10.0.0.2"}).status_code == 200

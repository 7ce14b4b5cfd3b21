from types import SimpleNamespace

from credit800.api import app as app_module
from credit800.api.app import THROTTLE_WINDOW, create_app
from credit800.core.store import MemoryStore
from tests.helpers.fakes import auth_headers


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    body = resp.get_json()
    assert body["error"] == "Not Found"
    assert "details" in body


def test_wrong_method_is_json(client):
    resp = client.get("/api/reports/upload", headers=auth_headers())
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "Method Not Allowed"


def test_non_object_body_is_rejected(client):
    resp = client.post("/api/goals", json=["not", "an", "object"], headers=auth_headers())
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid request body"


def test_unexpected_error_is_500(client, services):
    class Broken:
        def query(self, *args, **kwargs):
            raise RuntimeError("store offline")

        query_user = query

    services["store"] = Broken()
    resp = client.get("/api/reports", headers=auth_headers())
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error", "details": "store offline"}


def test_requests_are_throttled_per_token(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "2")
    client = create_app(store=MemoryStore()).test_client()

    assert client.get("/api/health", headers=auth_headers()).status_code == 200
    assert client.get("/api/health", headers=auth_headers()).status_code == 200
    resp = client.get("/api/health", headers=auth_headers())
    assert resp.status_code == 429
    assert resp.get_json()["retryAfter"] > 0

    assert client.get("/api/health", headers=auth_headers("bob")).status_code == 200


def test_throttle_window_resets_and_forgets_idle_clients(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(app_module, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    app = create_app(store=MemoryStore())
    client = app.test_client()

    assert client.get("/api/health", headers=auth_headers()).status_code == 200
    assert client.get("/api/health", headers=auth_headers()).status_code == 429
    assert set(app.request_counts) == {"good-alice"}

    clock[0] += THROTTLE_WINDOW
    assert client.get("/api/health", headers=auth_headers("bob")).status_code == 200
    assert set(app.request_counts) == {"good-bob"}
    assert client.get("/api/health", headers=auth_headers()).status_code == 200


def test_throttle_counts_are_per_app(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    first = create_app(store=MemoryStore()).test_client()
    second = create_app(store=MemoryStore()).test_client()
    assert first.get("/api/health").status_code == 200
    assert second.get("/api/health").status_code == 200
    assert first.get("/api/health").status_code == 429


def test_cors_is_opt_in(monkeypatch):
    origin = {"Origin": "http://localhost:5173"}
    plain = create_app(store=MemoryStore()).test_client()
    assert "Access-Control-Allow-Origin" not in plain.get("/api/health", headers=origin).headers

    monkeypatch.setenv("CORS_ENABLE", "1")
    cors = create_app(store=MemoryStore()).test_client()
    resp = cors.get("/api/health", headers=origin)
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

"""
tests/test_health.py -- Integration tests for GET /health and GET /.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' while the store answers, 'error' when not
  - No authentication required
  - Plaintext greeting on /
"""

from __future__ import annotations


def test_health_returns_200_with_components(api_client):
    """Health endpoint returns 200 with status, version, and components."""
    client, _ = api_client
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "version" in data
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_reports_degraded_when_store_unreachable(api_client, monkeypatch):
    """A failed ping keeps the endpoint at 200 but flags the database component."""
    client, store = api_client
    monkeypatch.setattr(store, "ping", lambda: False)
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"


def test_health_no_auth_required(api_client):
    client, _ = api_client
    resp = client.get("/health", headers={})
    assert resp.status_code == 200


def test_root_greeting_is_plaintext(api_client):
    client, _ = api_client
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello from AssetVerse.."
    assert resp.headers["content-type"].startswith("text/plain")

"""
tests/test_packages_routes.py -- Integration tests for GET /packages.
"""

from __future__ import annotations


def test_packages_empty_catalogue(api_client):
    client, store = api_client
    assert store.packages.count() == 0
    resp = client.get("/packages")
    assert resp.status_code == 200
    assert resp.json() == []


def test_packages_returns_every_document_in_order(api_client):
    client, store = api_client
    ids = store.packages.insert_many(
        [
            {"name": "Basic", "employeeLimit": 5, "price": 5},
            {"name": "Standard", "employeeLimit": 10, "price": 8},
            {"name": "Premium", "employeeLimit": 20, "price": 15, "features": ["priority support"]},
        ]
    )
    resp = client.get("/packages")
    assert resp.status_code == 200
    data = resp.json()
    assert [doc["_id"] for doc in data] == ids
    assert data[2]["features"] == ["priority support"]


def test_packages_is_public_and_read_only(api_client):
    client, _ = api_client
    assert client.get("/packages", headers={}).status_code == 200
    assert client.post("/packages", json={"name": "Free"}).status_code == 405

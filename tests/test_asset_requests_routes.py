"""
tests/test_asset_requests_routes.py -- Integration tests for asset request routes.

Coverage:
  - POST /asset-requests stamps requestDate, approvalDate=None and
    requestStatus="pending" over whatever the client sent
  - GET /asset-requests/{email} returns exactly the hrEmail subset
  - GET /asset-requests with and without ?email=
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from docstore.store import DocumentStore


def _submit(client: TestClient, **fields) -> str:
    resp = client.post("/asset-requests", json=fields)
    assert resp.status_code == 201, resp.text
    return resp.json()["insertedId"]


class TestCreateAssetRequest:
    def test_server_fields_are_stamped(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, store = api_client
        before = datetime.now(timezone.utc)
        request_id = _submit(client, hrEmail="hr@alpha.test", assetName="Laptop", requesterEmail="emp@alpha.test")

        stored = store.requests.find_one({"_id": request_id})
        assert stored["requestStatus"] == "pending"
        assert stored["approvalDate"] is None
        stamped = datetime.fromisoformat(stored["requestDate"])
        assert stamped.tzinfo is not None
        assert before - timedelta(seconds=5) <= stamped <= datetime.now(timezone.utc) + timedelta(seconds=5)
        assert stored["assetName"] == "Laptop"

    def test_client_values_for_server_fields_are_overwritten(
        self, api_client: tuple[TestClient, DocumentStore]
    ) -> None:
        client, store = api_client
        request_id = _submit(
            client,
            hrEmail="hr@alpha.test",
            requestStatus="approved",
            approvalDate="2020-01-01T00:00:00+00:00",
            requestDate="1999-12-31T00:00:00+00:00",
        )
        stored = store.requests.find_one({"_id": request_id})
        assert stored["requestStatus"] == "pending"
        assert stored["approvalDate"] is None
        assert not stored["requestDate"].startswith("1999")

    def test_request_without_hr_email_is_accepted(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, store = api_client
        request_id = _submit(client, assetName="Stapler")
        assert "hrEmail" not in store.requests.find_one({"_id": request_id})


class TestListAssetRequests:
    def test_path_filter_returns_exact_subset(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, _ = api_client
        mine = {_submit(client, hrEmail="owner@beta.test", assetName=name) for name in ("Desk", "Lamp")}
        _submit(client, hrEmail="other@beta.test", assetName="Chair")

        resp = client.get("/asset-requests/owner@beta.test")
        assert resp.status_code == 200
        data = resp.json()
        assert {doc["_id"] for doc in data} == mine
        assert all(doc["hrEmail"] == "owner@beta.test" for doc in data)

    def test_unmatched_email_returns_empty_list(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, _ = api_client
        resp = client.get("/asset-requests/nobody@gamma.test")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_query_filter(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, _ = api_client
        request_id = _submit(client, hrEmail="query@delta.test")
        resp = client.get("/asset-requests", params={"email": "query@delta.test"})
        assert resp.status_code == 200
        assert [doc["_id"] for doc in resp.json()] == [request_id]

    def test_hr_email_is_matched_exactly_as_sent(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, store = api_client
        request_id = _submit(client, hrEmail=" padded@zeta.test ")
        assert store.requests.find_one({"_id": request_id})["hrEmail"] == " padded@zeta.test "

        padded = client.get("/asset-requests", params={"email": " padded@zeta.test "})
        assert [doc["_id"] for doc in padded.json()] == [request_id]
        assert client.get("/asset-requests/padded@zeta.test").json() == []

    def test_without_email_returns_all(self, api_client: tuple[TestClient, DocumentStore]) -> None:
        client, store = api_client
        _submit(client, hrEmail="all@epsilon.test")
        resp = client.get("/asset-requests")
        assert resp.status_code == 200
        assert len(resp.json()) == store.requests.count()

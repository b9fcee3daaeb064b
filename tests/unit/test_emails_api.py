"""Unit tests for the emails HTTP API.

Runs the FastAPI application in-process against an injected store.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from mailcatcher.emails import router as emails_router
from mailcatcher.main import create_app


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestListEmails:

    def test_empty_list(self, client):
        response = client.get("/api/v1/emails")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"total": 0, "count": 0, "items": []}

    def test_items_in_insertion_order(self, client, store, make_draft):
        for subject in ["first", "second", "third"]:
            store.append(make_draft(subject=subject))

        data = client.get("/api/v1/emails").json()

        assert data["total"] == 3
        assert data["count"] == 3
        assert [item["subject"] for item in data["items"]] == ["first", "second", "third"]
        assert [item["id"] for item in data["items"]] == ["msg-0", "msg-1", "msg-2"]

    def test_email_json_shape(self, client, store, make_draft):
        stored = store.append(make_draft(
            sender="a@x.com",
            recipients=["b@x.com", "c@x.com"],
            subject="Shape",
            body="Subject: Shape\r\n\r\nBody text",
        ))

        [item] = client.get("/api/v1/emails").json()["items"]

        assert set(item) == {"id", "from", "to", "subject", "body", "time"}
        assert item["id"] == "msg-0"
        assert item["from"] == "a@x.com"
        assert item["to"] == ["b@x.com", "c@x.com"]
        assert item["subject"] == "Shape"
        assert item["body"] == "Subject: Shape\r\n\r\nBody text"
        assert _parse_time(item["time"]) == stored.received_at

    def test_empty_recipient_list_serializes_as_array(self, client, store, make_draft):
        store.append(make_draft(recipients=[]))

        [item] = client.get("/api/v1/emails").json()["items"]

        assert item["to"] == []

    def test_encode_failure_returns_500(self, client, store, make_draft, monkeypatch):
        store.append(make_draft())
        broken = Mock(return_value=Mock(
            model_dump_json=Mock(side_effect=ValueError("cannot encode"))
        ))
        monkeypatch.setattr(emails_router, "EmailListResponse", broken)

        response = client.get("/api/v1/emails")

        assert response.status_code == 500
        assert response.text == "Failed to encode response"
        assert response.headers["access-control-allow-origin"] == "*"


class TestGetEmail:

    def test_get_existing(self, client, store, make_draft):
        store.append(make_draft(subject="zero"))
        store.append(make_draft(subject="one"))

        response = client.get("/api/v1/emails/msg-1")

        assert response.status_code == 200
        assert response.json()["id"] == "msg-1"
        assert response.json()["subject"] == "one"

    def test_unknown_id_is_plain_text_404(self, client):
        response = client.get("/api/v1/emails/msg-42")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Email not found"

    def test_empty_id_is_404(self, client):
        response = client.get("/api/v1/emails/")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Email ID is required"

    def test_id_after_clear(self, client, store, make_draft):
        store.append(make_draft())
        store.clear()

        assert client.get("/api/v1/emails/msg-0").status_code == 404


class TestClearEmails:

    def test_delete_clears_store(self, client, store, make_draft):
        store.append(make_draft())
        store.append(make_draft())

        response = client.delete("/api/v1/emails")

        assert response.status_code == 204
        assert response.content == b""
        assert len(store) == 0
        assert client.get("/api/v1/emails").json()["total"] == 0

    def test_delete_on_empty_store(self, client):
        assert client.delete("/api/v1/emails").status_code == 204


class TestCORS:

    @pytest.mark.parametrize("path", ["/api/v1/emails", "/api/v1/emails/msg-0", "/anything"])
    def test_options_preflight(self, client, path):
        response = client.options(path)

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, DELETE, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type"

    def test_headers_on_success(self, client):
        response = client.get("/api/v1/emails")
        assert response.headers["access-control-allow-origin"] == "*"

    def test_headers_on_not_found(self, client):
        response = client.get("/api/v1/emails/missing")
        assert response.headers["access-control-allow-origin"] == "*"

    def test_headers_on_unhandled_error(self):
        store = Mock()
        store.list_all.side_effect = RuntimeError("store exploded")
        client = TestClient(create_app(store), raise_server_exceptions=False)

        response = client.get("/api/v1/emails")

        assert response.status_code == 500
        assert response.text == "Failed to encode response"
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, DELETE, OPTIONS"


class TestRoutingAndObservability:

    def test_unknown_path_is_plain_text_404(self, client):
        response = client.get("/api/v2/nothing")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/v1/emails", headers={"X-Request-ID": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/v1/emails")
        assert response.headers["x-request-id"]

    def test_health(self, client, store, make_draft):
        store.append(make_draft())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "emails": 1}

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "mailcatcher_emails_captured_total" in response.text

"""End-to-end tests for the HTTP API."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from lead_capture.config.settings import TestingSettings
from lead_capture.main import create_app

pytestmark = pytest.mark.integration

LEADS_URL = "/api/v1/leads"


@pytest.fixture
def app():
    return create_app(TestingSettings())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def container(app, client):
    return app.state.container


@pytest.fixture
def lead():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "company": "Analytical Engines",
        "message": "Tell me more",
    }


class TestLeadSubmission:
    """Test the lead submission endpoint."""

    def test_submit_lead_success(self, client, container, lead):
        response = client.post(
            LEADS_URL, json=lead, headers={"Referer": "https://example.com/contact"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "success"
        assert data["user_message"] == "Thank you! We'll be in touch within 24 hours."
        assert data["field_errors"] == []

        rows = list(container.gateway.store.rows.values())
        assert len(rows) == 1
        assert rows[0]["id"] == data["submission_id"]
        assert rows[0]["source"] == "direct"
        assert rows[0]["user_agent"] == "testclient"
        assert rows[0]["referrer"] == "https://example.com/contact"

    def test_submit_lead_rejected(self, client, container):
        response = client.post(LEADS_URL, json={"firstName": "Ada", "email": "nope"})

        assert response.status_code == 422
        data = response.json()
        assert data["status"] == "rejected_input"
        fields = {error["field"] for error in data["field_errors"]}
        assert fields == {"last_name", "email", "company"}
        assert container.gateway.store.insert_calls == []

    def test_submit_lead_degraded(self, client, container, lead):
        """An unavailable remote still accepts the lead."""
        container.gateway.store.available = False

        response = client.post(LEADS_URL, json=lead)

        assert response.status_code == 202
        data = response.json()
        assert data["status"] == "degraded_success"
        assert "recorded" in data["user_message"]

        entries = container.queue.list_unsynced()
        assert [str(entry.id) for entry in entries] == [data["submission_id"]]
        assert entries[0].record.source == "retry_exhausted_fallback"

    def test_non_object_body(self, client):
        response = client.post(LEADS_URL, json=["not", "a", "form"])

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"


class TestReconciliationEndpoints:
    """Test reconciliation endpoints."""

    def test_reconcile_queued_lead(self, client, container, lead):
        store = container.gateway.store
        store.available = False
        submission_id = client.post(LEADS_URL, json=lead).json()["submission_id"]

        status = client.get("/api/v1/reconciliation").json()
        assert status["total"] == 1
        assert status["unsynced"] == 1
        assert status["oldest_unsynced"] is not None
        assert status["running"] is False

        store.available = True
        response = client.post("/api/v1/reconciliation")

        assert response.status_code == 200
        report = response.json()
        assert report["synced"] == 1
        assert report["failed"] == 0

        rows = {str(key): row for key, row in store.rows.items()}
        assert rows[submission_id]["source"] == "retry_exhausted_fallback_synced"

        purged = client.delete("/api/v1/reconciliation/synced")
        assert purged.json() == {"removed": 1}
        assert client.get("/api/v1/reconciliation").json()["total"] == 0

    def test_startup_migrates_legacy_buckets(self):
        """Legacy buckets are imported and delivered at startup."""
        app = create_app(TestingSettings())
        container = app.state.container
        legacy = [
            {
                "id": "1700000000000",
                "timestamp": "2023-11-14T22:13:20.000Z",
                "form_data": {
                    "firstName": "Grace",
                    "lastName": "Hopper",
                    "email": "grace@example.com",
                    "company": "Navy",
                },
                "synced": False,
            }
        ]

        asyncio.run(container.initialize())
        container.queue.store.write("pending_submissions", json.dumps(legacy))

        with TestClient(app) as client:
            client.portal.call(container.reconciliation_scheduler.wait_idle)

            rows = list(container.gateway.store.rows.values())
            assert [row["email"] for row in rows] == ["grace@example.com"]
            assert rows[0]["source"] == "legacy_migration_synced"


class TestHealthEndpoints:
    """Test health endpoints."""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["remote"]["configured"] is True
        assert data["remote"]["consecutive_failure_count"] == 0

    def test_liveness(self, client):
        assert client.get("/api/v1/health/live").json()["status"] == "alive"

    def test_probe(self, client, container):
        response = client.post("/api/v1/health/probe")

        assert response.status_code == 200
        data = response.json()
        assert data["probe"]["status"] == "healthy"
        assert data["remote"]["is_healthy"] is True

        container.gateway.store.available = False
        data = client.post("/api/v1/health/probe").json()
        assert data["probe"]["status"] == "unhealthy"
        assert data["remote"]["consecutive_failure_count"] == 1


class TestObservability:
    """Test metrics and correlation ids."""

    def test_metrics_endpoint(self, client, lead):
        client.post(LEADS_URL, json=lead)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'lead_submissions_total{status="success"} 1.0' in response.text
        assert "http_requests_total" in response.text

    def test_correlation_id_echoed(self, client):
        response = client.get("/api/v1/health/live", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"
        assert "X-Process-Time" in response.headers

    def test_correlation_id_generated(self, client):
        response = client.get("/")

        assert len(response.headers["X-Correlation-ID"]) == 36
        assert response.json()["status"] == "running"

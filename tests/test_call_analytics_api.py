"""Tests for the call analytics HTTP routes."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from conftest import NOW, FakeProvider, FakeTenantResolver, raw_call
from fastapi.testclient import TestClient

from dashboard.api.main import app
from dashboard.api.routers.call_analytics import get_engine
from scripts.analytics.engine import CallAnalyticsEngine
from scripts.lib.errors import ProviderTimeoutError, ProviderUnavailableError


def engine_with(provider):
    return CallAnalyticsEngine(
        provider=provider,
        tenant_resolver=FakeTenantResolver({"user_1": "asst_1"}),
        clock=lambda: NOW,
    )


@pytest.fixture
def client_for():
    def _make(provider):
        app.dependency_overrides[get_engine] = lambda: engine_with(provider)
        return TestClient(app)
    yield _make
    app.dependency_overrides.clear()


class TestAnalyticsRoute:
    def test_returns_snapshot(self, client_for):
        client = client_for(FakeProvider([
            raw_call("a", created=NOW - timedelta(hours=2)),
            raw_call("b", created=NOW - timedelta(hours=1)),
            raw_call("x", owner="asst_2"),
        ]))
        response = client.get("/api/calls/analytics?days=7&limit=10",
                              headers={"X-User-Id": "user_1"})
        assert response.status_code == 200
        body = response.json()
        assert body["metrics"]["total_calls"] == 2
        assert [c["id"] for c in body["recent_calls"]] == ["b", "a"]
        assert body["trends"]["call_volume_trend"] in {"up", "down", "stable"}
        assert len(body["metrics"]["calls_by_hour"]) == 24
        assert body["days"] == 7

    def test_missing_user_header_rejected(self, client_for):
        client = client_for(FakeProvider([]))
        assert client.get("/api/calls/analytics").status_code == 422

    def test_unknown_user_gets_empty_snapshot(self, client_for):
        client = client_for(FakeProvider([raw_call("a")]))
        response = client.get("/api/calls/analytics", headers={"X-User-Id": "nobody"})
        assert response.status_code == 200
        assert response.json()["metrics"]["total_calls"] == 0

    def test_provider_failure_maps_to_502(self, client_for):
        client = client_for(FakeProvider(error=ProviderUnavailableError("down", status_code=500)))
        response = client.get("/api/calls/analytics", headers={"X-User-Id": "user_1"})
        assert response.status_code == 502

    def test_provider_timeout_maps_to_504(self, client_for):
        client = client_for(FakeProvider(error=ProviderTimeoutError("https://api.vapi.ai/call", 15)))
        response = client.get("/api/calls/analytics", headers={"X-User-Id": "user_1"})
        assert response.status_code == 504

    def test_days_validated(self, client_for):
        client = client_for(FakeProvider([]))
        response = client.get("/api/calls/analytics?days=0", headers={"X-User-Id": "user_1"})
        assert response.status_code == 422


class TestRecentRoute:
    def test_recent_calls(self, client_for):
        client = client_for(FakeProvider([
            raw_call("old", created=NOW - timedelta(days=2)),
            raw_call("new", created=NOW - timedelta(minutes=5)),
        ]))
        response = client.get("/api/calls/recent?limit=1", headers={"X-User-Id": "user_1"})
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["results"][0]["id"] == "new"


class TestHealth:
    def test_health_reports_integrations(self):
        with patch.dict("os.environ", {"SUPABASE_URL": "", "SUPABASE_KEY": "",
                                       "SUPABASE_SERVICE_ROLE_KEY": ""}, clear=False):
            response = TestClient(app).get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["service"] == "Callboard"
        assert body["integrations"]["supabase"] is False

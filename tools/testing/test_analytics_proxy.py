"""
Test the /api/campaigns/analytics proxy route.

Tests:
1. Non-GET -> 405 before any upstream call
2. Missing server key -> 500
3. Query forwarded verbatim with server credential
4. Upstream errors relayed as-is
5. Network / parse failures -> generic 500

Run: pytest tools/testing/test_analytics_proxy.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from unittest.mock import Mock

import pytest
import requests

from outreach_dashboard.app import create_app

TEST_CONFIG = {"TESTING": True, "RATELIMIT_ENABLED": False}


class _FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json


@pytest.fixture
def upstream(monkeypatch):
    """Replace Session.get for the proxy's shared session; returns the Mock."""
    fake_get = Mock(return_value=_FakeResponse(json_data=[{"campaign_id": "a"}]))
    monkeypatch.setattr("requests.Session.get", fake_get)
    return fake_get


def _test_client(monkeypatch, api_key="server-key"):
    if api_key is None:
        monkeypatch.delenv("INSTANTLY_API_KEY", raising=False)
    else:
        monkeypatch.setenv("INSTANTLY_API_KEY", api_key)
    monkeypatch.setenv("INSTANTLY_API_BASE_URL", "https://api.example.test/api/v2")
    app = create_app(analytics_client=Mock(), config_overrides=TEST_CONFIG)
    return app.test_client()


def test_post_rejected_before_upstream_call(monkeypatch, upstream):
    client = _test_client(monkeypatch)

    response = client.post("/api/campaigns/analytics")

    assert response.status_code == 405
    assert response.get_json() == {"error": "Method not allowed"}
    upstream.assert_not_called()


@pytest.mark.parametrize("method", ["put", "patch", "delete", "options"])
def test_other_methods_rejected(monkeypatch, upstream, method):
    client = _test_client(monkeypatch)

    response = getattr(client, method)("/api/campaigns/analytics")

    assert response.status_code == 405
    assert response.get_json() == {"error": "Method not allowed"}
    upstream.assert_not_called()


def test_head_rejected(monkeypatch, upstream):
    client = _test_client(monkeypatch)

    response = client.head("/api/campaigns/analytics")

    assert response.status_code == 405
    upstream.assert_not_called()


def test_proxy_uses_app_session(monkeypatch, upstream):
    monkeypatch.setenv("INSTANTLY_API_KEY", "server-key")
    app = create_app(analytics_client=Mock(), config_overrides=TEST_CONFIG)
    session = Mock()
    session.get.return_value = _FakeResponse(json_data=[])
    app.config["PROXY_SESSION"] = session

    response = app.test_client().get("/api/campaigns/analytics?id=a")

    assert response.status_code == 200
    session.get.assert_called_once()
    assert session.get.call_args.kwargs["params"] == [("id", "a")]
    upstream.assert_not_called()


def test_missing_server_key(monkeypatch, upstream):
    client = _test_client(monkeypatch, api_key=None)

    response = client.get("/api/campaigns/analytics")

    assert response.status_code == 500
    assert response.get_json() == {"error": "API key not configured"}
    upstream.assert_not_called()


def test_forwards_query_with_server_credential(monkeypatch, upstream):
    """Repeated keys survive; client Authorization is ignored."""
    client = _test_client(monkeypatch)

    response = client.get(
        "/api/campaigns/analytics?ids=a&ids=b&start_date=2026-09-19&exclude_total_leads_count=false",
        headers={"Authorization": "Bearer client-supplied"},
    )

    assert response.status_code == 200
    assert response.get_json() == [{"campaign_id": "a"}]

    upstream.assert_called_once()
    args, kwargs = upstream.call_args
    assert args[0] == "https://api.example.test/api/v2/campaigns/analytics"
    assert kwargs["params"] == [
        ("ids", "a"), ("ids", "b"),
        ("start_date", "2026-09-19"),
        ("exclude_total_leads_count", "false"),
    ]
    assert kwargs["headers"]["Authorization"] == "Bearer server-key"
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_upstream_error_relayed_unchanged(monkeypatch, upstream):
    body = {"statusCode": 429, "error": "Too Many Requests", "message": "Rate limit exceeded"}
    upstream.return_value = _FakeResponse(status_code=429, json_data=body)
    client = _test_client(monkeypatch)

    response = client.get("/api/campaigns/analytics")

    assert response.status_code == 429
    assert response.get_json() == body


def test_network_failure_is_generic_500(monkeypatch, upstream):
    upstream.side_effect = requests.ConnectionError("secret-host.internal refused connection")
    client = _test_client(monkeypatch)

    response = client.get("/api/campaigns/analytics")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to fetch analytics"}
    assert b"secret-host" not in response.data, "Exception detail must not leak"


def test_unparseable_body_is_generic_500(monkeypatch, upstream):
    upstream.return_value = _FakeResponse(status_code=502, json_data=None)
    client = _test_client(monkeypatch)

    response = client.get("/api/campaigns/analytics")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to fetch analytics"}

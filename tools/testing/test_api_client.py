"""
Test the Instantly analytics client - query encoding and error propagation.

Run: pytest tools/testing/test_api_client.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from unittest.mock import Mock

import pytest
import requests

from outreach_dashboard.api_client import (
    AnalyticsAPIError, AnalyticsClient, build_query_params,
)
from outreach_dashboard.models import AnalyticsQuery, CampaignRecord
from outreach_dashboard.settings import ClientSettings


class _FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON")
        return self._json


def _client(response):
    session = Mock(spec=requests.Session)
    session.headers = {}
    session.get.return_value = response
    return AnalyticsClient("test-key", base_url="https://api.example.test/api/v2/", session=session), session


def test_ids_are_repeated_not_joined():
    """ids=["x","y"] -> two separate ids pairs."""
    params = build_query_params(AnalyticsQuery(ids=["x", "y"]))

    assert params == [("ids", "x"), ("ids", "y")]
    assert ("ids", "x,y") not in params


def test_all_fields_encoded_in_order():
    query = AnalyticsQuery(
        id="one", ids=("a",), start_date="2026-09-19", end_date="2026-10-19",
        exclude_total_leads_count=True,
    )

    assert build_query_params(query) == [
        ("id", "one"),
        ("ids", "a"),
        ("start_date", "2026-09-19"),
        ("end_date", "2026-10-19"),
        ("exclude_total_leads_count", "true"),
    ]


def test_exclude_flag_false_is_sent_unset_is_not():
    """Explicit false differs from absent."""
    assert build_query_params(AnalyticsQuery(exclude_total_leads_count=False)) == [
        ("exclude_total_leads_count", "false")
    ]
    assert build_query_params(AnalyticsQuery()) == []
    assert build_query_params(None) == []


def test_dates_passed_through_unvalidated():
    params = build_query_params(AnalyticsQuery(start_date="not-a-date"))
    assert params == [("start_date", "not-a-date")]


def test_headers_set_on_session():
    _, session = _client(_FakeResponse(json_data=[]))

    assert session.headers["Authorization"] == "Bearer test-key"
    assert session.headers["Content-Type"] == "application/json"


def test_get_campaign_analytics_parses_records():
    payload = [
        {"campaign_id": "a", "campaign_name": "Alpha", "campaign_status": 1,
         "emails_sent_count": 100, "open_count": 20, "some_new_field": "ignored"},
        {"campaign_id": "b", "campaign_name": "Bravo", "campaign_status": -1},
    ]
    client, session = _client(_FakeResponse(json_data=payload))

    campaigns = client.get_campaign_analytics(AnalyticsQuery(ids=["a", "b"]))

    assert all(isinstance(c, CampaignRecord) for c in campaigns)
    assert [c.campaign_id for c in campaigns] == ["a", "b"]
    assert campaigns[0].emails_sent_count == 100
    assert campaigns[1].status_badge.label == "Stopped"

    session.get.assert_called_once_with(
        "https://api.example.test/api/v2/campaigns/analytics",
        params=[("ids", "a"), ("ids", "b")],
    )


def test_http_error_keeps_status_and_body():
    """Non-2xx raises with the untouched body."""
    body = '{"statusCode":401,"error":"Unauthorized","message":"Invalid API key"}'
    client, _ = _client(_FakeResponse(status_code=401, text=body))

    with pytest.raises(AnalyticsAPIError) as exc_info:
        client.get_campaign_analytics()

    assert exc_info.value.status_code == 401
    assert exc_info.value.body == body
    assert "401" in str(exc_info.value)


def test_transport_error_propagates():
    client, session = _client(None)
    session.get.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(requests.ConnectionError):
        client.get_campaign_analytics()

    assert session.get.call_count == 1, "Client must not retry"


def test_non_list_payload_rejected():
    client, _ = _client(_FakeResponse(json_data={"items": []}))

    with pytest.raises(ValueError):
        client.get_campaign_analytics()


def test_from_settings():
    client = AnalyticsClient.from_settings(
        ClientSettings(api_key="k", api_base_url="https://api.example.test/api/v2")
    )

    assert client.base_url == "https://api.example.test/api/v2"
    assert client.session.headers["Authorization"] == "Bearer k"

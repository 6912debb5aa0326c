"""
Instantly v2 analytics API client.

Handles:
- Query string construction for campaigns/analytics
- Bearer authentication
- HTTP error propagation (status + body preserved)

No retries and no explicit timeout: failures surface to the caller as-is.
"""

from typing import List, Optional, Tuple

import requests

from outreach_dashboard.logging_config import setup_logging
from outreach_dashboard.models import AnalyticsQuery, CampaignRecord
from outreach_dashboard.settings import DEFAULT_API_BASE_URL, ClientSettings

logger = setup_logging(__name__)

ANALYTICS_PATH = "/campaigns/analytics"


class AnalyticsAPIError(Exception):
    """Upstream returned a non-2xx status. Body is kept exactly as received."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request failed with status code {status_code}")


def build_query_params(query: Optional[AnalyticsQuery]) -> List[Tuple[str, str]]:
    """
    Encode an AnalyticsQuery as ordered query-string pairs.

    ids are sent as one repeated "ids" pair per element, never comma-joined.
    exclude_total_leads_count is sent only when explicitly set, since the API
    treats "false" differently from absent.

    Args:
        query: Filters for the request (None = no filters)

    Returns:
        List of (key, value) tuples suitable for requests' params=
    """
    if query is None:
        return []

    params: List[Tuple[str, str]] = []
    if query.id:
        params.append(("id", query.id))
    if query.ids:
        params.extend(("ids", campaign_id) for campaign_id in query.ids)
    if query.start_date:
        params.append(("start_date", query.start_date))
    if query.end_date:
        params.append(("end_date", query.end_date))
    if query.exclude_total_leads_count is not None:
        params.append(
            ("exclude_total_leads_count", str(query.exclude_total_leads_count).lower())
        )
    return params


class AnalyticsClient:
    """Thin typed caller for GET /campaigns/analytics."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "AnalyticsClient":
        return cls(api_key=settings.api_key, base_url=settings.api_base_url)

    def get_campaign_analytics(self, query: Optional[AnalyticsQuery] = None) -> List[CampaignRecord]:
        """
        Fetch per-campaign analytics.

        Args:
            query: Filters (campaign ids, date range, flags)

        Returns:
            List of CampaignRecord

        Raises:
            AnalyticsAPIError: On non-2xx upstream status
            requests.RequestException: On transport failure
            ValueError: If the body is not a JSON array of campaigns
        """
        url = f"{self.base_url}{ANALYTICS_PATH}"
        params = build_query_params(query)
        logger.info(f"GET {url} params={params}")

        response = self.session.get(url, params=params)

        if not response.ok:
            logger.error(
                f"Analytics request failed: status={response.status_code}, "
                f"body={response.text[:800]}"
            )
            raise AnalyticsAPIError(response.status_code, response.text)

        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(f"Expected a JSON array of campaigns, got {type(payload).__name__}")

        campaigns = [CampaignRecord.model_validate(item) for item in payload]
        logger.info(f"Fetched {len(campaigns)} campaigns")
        return campaigns

"""
Outreach analytics data models - CampaignRecord, AnalyticsQuery, AnalyticsSummary.

CampaignRecord mirrors one row of the Instantly v2 campaigns/analytics
response. Field names match the wire format so records validate directly
from the upstream JSON.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class CampaignStatus(IntEnum):
    """Campaign lifecycle status codes declared by the upstream API."""
    DRAFT = 0
    ACTIVE = 1
    PAUSED = 2
    COMPLETED = 3
    RUNNING_SUBSEQUENCES = 4


# Returned by the upstream API although it is not part of the declared enum
STOPPED_STATUS = -1


class StatusBadge(NamedTuple):
    code: int
    label: str
    css_class: str


_STATUS_BADGES: Dict[int, Tuple[str, str]] = {
    CampaignStatus.DRAFT: ("Draft", "bg-secondary-subtle text-secondary-emphasis"),
    CampaignStatus.ACTIVE: ("Active", "bg-primary-subtle text-primary-emphasis"),
    CampaignStatus.PAUSED: ("Paused", "bg-warning-subtle text-warning-emphasis"),
    CampaignStatus.COMPLETED: ("Completed", "bg-success-subtle text-success-emphasis"),
    CampaignStatus.RUNNING_SUBSEQUENCES: ("Running", "bg-info-subtle text-info-emphasis"),
    STOPPED_STATUS: ("Stopped", "bg-danger-subtle text-danger-emphasis"),
}

UNKNOWN_STATUS_LABEL = "Unknown"
_UNKNOWN_STATUS_CLASS = "bg-light text-dark"


def describe_status(code: int) -> StatusBadge:
    """
    Map a campaign status code to its display label and badge class.

    Total over integers: codes outside the known set map to "Unknown".

    Args:
        code: Raw campaign_status value from the API

    Returns:
        StatusBadge(code, label, css_class)
    """
    label, css_class = _STATUS_BADGES.get(code, (UNKNOWN_STATUS_LABEL, _UNKNOWN_STATUS_CLASS))
    return StatusBadge(int(code), label, css_class)


# Status filter domain, in dropdown display order
STATUS_OPTIONS: List[StatusBadge] = [
    describe_status(code)
    for code in (
        CampaignStatus.ACTIVE,
        CampaignStatus.PAUSED,
        CampaignStatus.DRAFT,
        CampaignStatus.COMPLETED,
        STOPPED_STATUS,
    )
]


class CampaignRecord(BaseModel):
    """Per-campaign analytics snapshot for one query window."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    campaign_id: str
    campaign_name: str = ""
    campaign_status: int = 0
    campaign_is_evergreen: bool = False

    leads_count: int = 0
    contacted_count: int = 0
    emails_sent_count: int = 0

    open_count: int = 0
    open_count_unique: int = 0
    reply_count: int = 0
    reply_count_unique: int = 0
    link_click_count: int = 0
    link_click_count_unique: int = 0
    bounced_count: int = 0
    unsubscribed_count: int = 0
    completed_count: int = 0
    new_leads_contacted_count: int = 0

    total_opportunities: int = 0
    total_opportunity_value: float = 0.0

    @property
    def status_badge(self) -> StatusBadge:
        return describe_status(self.campaign_status)


class AnalyticsQuery(BaseModel):
    """
    Filters for a campaigns/analytics request.

    Every field narrows the upstream result; None means no constraint.
    Instances are frozen and hashable so equal queries share a cache entry.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    ids: Optional[Tuple[str, ...]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    exclude_total_leads_count: Optional[bool] = None

    @field_validator("ids", mode="before")
    @classmethod
    def ids_as_tuple(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str):
            return (v,)
        return tuple(v)


@dataclass(frozen=True)
class AnalyticsSummary:
    """Totals and derived rates over a set of campaigns. Never persisted."""
    total_leads: int = 0
    total_contacted: int = 0
    total_emails_sent: int = 0
    total_opens: int = 0
    total_unique_opens: int = 0
    total_replies: int = 0
    total_unique_replies: int = 0
    total_clicks: int = 0
    total_unique_clicks: int = 0
    total_bounces: int = 0
    total_unsubscribed: int = 0
    total_completed: int = 0
    total_new_leads_contacted: int = 0
    total_opportunities: int = 0
    total_opportunity_value: float = 0.0
    avg_open_rate: float = 0.0          # % of emails sent
    avg_reply_rate: float = 0.0         # % of emails sent
    avg_click_rate: float = 0.0         # % of emails sent
    bounce_rate: float = 0.0            # % of emails sent

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

"""
Campaign analytics aggregation.
"""

from typing import Iterable

from outreach_dashboard.models import AnalyticsSummary, CampaignRecord

# summary field -> CampaignRecord field
_TOTALS = {
    'total_leads': 'leads_count',
    'total_contacted': 'contacted_count',
    'total_emails_sent': 'emails_sent_count',
    'total_opens': 'open_count',
    'total_unique_opens': 'open_count_unique',
    'total_replies': 'reply_count',
    'total_unique_replies': 'reply_count_unique',
    'total_clicks': 'link_click_count',
    'total_unique_clicks': 'link_click_count_unique',
    'total_bounces': 'bounced_count',
    'total_unsubscribed': 'unsubscribed_count',
    'total_completed': 'completed_count',
    'total_new_leads_contacted': 'new_leads_contacted_count',
    'total_opportunities': 'total_opportunities',
    'total_opportunity_value': 'total_opportunity_value',
}


def campaign_rate(value: float, emails_sent: float) -> float:
    """
    Percentage of emails sent, e.g. 12.5 for 12.5%.

    Returns 0 when nothing was sent, even if value is positive.
    """
    return (value / emails_sent) * 100 if emails_sent > 0 else 0.0


def calculate_summary(campaigns: Iterable[CampaignRecord]) -> AnalyticsSummary:
    """
    Sum every counter across campaigns and derive the four headline rates.

    Single pass, no per-record validation. An empty input yields an
    all-zero summary.

    Args:
        campaigns: Campaign records (typically already filtered)

    Returns:
        AnalyticsSummary
    """
    totals = {name: 0 for name in _TOTALS}
    totals['total_opportunity_value'] = 0.0

    for campaign in campaigns:
        for name, source in _TOTALS.items():
            totals[name] += getattr(campaign, source)

    sent = totals['total_emails_sent']
    return AnalyticsSummary(
        **totals,
        avg_open_rate=campaign_rate(totals['total_opens'], sent),
        avg_reply_rate=campaign_rate(totals['total_replies'], sent),
        avg_click_rate=campaign_rate(totals['total_clicks'], sent),
        bounce_rate=campaign_rate(totals['total_bounces'], sent),
    )

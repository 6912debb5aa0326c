"""
Dashboard page route - summary cards, engagement chart, campaign table.
"""

from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, jsonify, render_template, request, url_for

from outreach_dashboard.api_client import AnalyticsAPIError
from outreach_dashboard.filters import (
    Dropdown, FilterState, campaign_filter_label, status_filter_label,
)
from outreach_dashboard.formatting import truncate_name
from outreach_dashboard.logging_config import setup_logging
from outreach_dashboard.models import STATUS_OPTIONS, AnalyticsQuery, CampaignRecord
from outreach_dashboard.routes.shared import get_analytics_cache, get_date_range_from_args
from outreach_dashboard.summary import calculate_summary, campaign_rate

logger = setup_logging(__name__)

bp = Blueprint('dashboard', __name__)

CHART_CAMPAIGN_LIMIT = 10
BOUNCE_WARNING_RATE = 5.0

NO_MATCHES_MESSAGE = 'No campaigns match the selected filters.'
NO_DATA_MESSAGE = 'No campaign data available for the selected date range.'

FILTER_DROPDOWNS = ('campaign', 'status')

# sort key -> column header
SORTABLE_COLUMNS = {
    'campaign_name': 'Campaign',
    'campaign_status': 'Status',
    'leads_count': 'Leads',
    'emails_sent_count': 'Sent',
    'open_count': 'Opens',
    'reply_count': 'Replies',
    'total_opportunities': 'Opportunities',
    'link_click_count': 'Clicks',
    'bounced_count': 'Bounces',
}


def sort_campaigns(
    campaigns: List[CampaignRecord],
    sort: Optional[str],
    order: str = 'desc',
) -> List[CampaignRecord]:
    """
    Sort the table rows. Unknown sort keys keep upstream order.

    Names sort case-insensitively; ties keep their relative order.
    """
    if sort not in SORTABLE_COLUMNS:
        return list(campaigns)

    if sort == 'campaign_name':
        key = lambda c: c.campaign_name.lower()
    else:
        key = lambda c: getattr(c, sort)

    return sorted(campaigns, key=key, reverse=(order != 'asc'))


def build_chart_data(campaigns: List[CampaignRecord]) -> Dict[str, List]:
    """Opens/Replies/Clicks series for the first 10 campaigns."""
    top = campaigns[:CHART_CAMPAIGN_LIMIT]
    return {
        'labels': [truncate_name(c.campaign_name) for c in top],
        'opens': [c.open_count for c in top],
        'replies': [c.reply_count for c in top],
        'clicks': [c.link_click_count for c in top],
    }


def build_table_rows(campaigns: List[CampaignRecord]) -> List[Dict[str, Any]]:
    """Table row dicts with per-campaign rates."""
    rows = []
    for c in campaigns:
        sent = c.emails_sent_count
        rows.append({
            'campaign': c,
            'status': c.status_badge,
            'open_rate': campaign_rate(c.open_count, sent),
            'reply_rate': campaign_rate(c.reply_count, sent),
            'click_rate': campaign_rate(c.link_click_count, sent),
            'bounce_rate': campaign_rate(c.bounced_count, sent),
        })
    return rows


def load_dashboard_data() -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Fetch (via cache), filter and aggregate campaigns for the current request.

    Returns:
        (context, error_message) - error_message is None on success
    """
    start_date, end_date = get_date_range_from_args()
    filters = FilterState.from_request_args(request.args)
    sort = request.args.get('sort')
    order = 'asc' if request.args.get('order') == 'asc' else 'desc'

    query = AnalyticsQuery(start_date=start_date, end_date=end_date)
    result = get_analytics_cache().fetch(query)

    context = {
        'start_date': start_date,
        'end_date': end_date,
        'filters': filters,
        'sort': sort if sort in SORTABLE_COLUMNS else None,
        'order': order,
    }

    if result.is_error:
        return context, _error_message(result.error)

    campaigns = result.data or []
    filtered = filters.apply(campaigns)
    summary = calculate_summary(filtered) if filtered else None

    if filtered:
        empty_message = None
    elif campaigns:
        empty_message = NO_MATCHES_MESSAGE
    else:
        empty_message = NO_DATA_MESSAGE

    context.update({
        'campaigns': campaigns,
        'filtered_campaigns': filtered,
        'summary': summary,
        'empty_message': empty_message,
        'has_active_filters': filters.has_active_filters,
        'campaign_filter_label': campaign_filter_label(filters, campaigns),
        'status_filter_label': status_filter_label(filters),
    })
    return context, None


def _error_message(error: BaseException) -> str:
    if isinstance(error, AnalyticsAPIError):
        return str(error)
    # transport / parse problems: details stay in the log
    return 'Failed to fetch analytics data'


@bp.route("/")
def home():
    """
    Dashboard home page.

    Query args:
        start_date, end_date: YYYY-MM-DD (default: last month)
        campaign: repeated campaign ids to include
        status: repeated status codes to include
        sort, order: table sort column and direction
        open: filter dropdown to render open ("campaign" or "status")
    """
    context, error_message = load_dashboard_data()

    if error_message:
        return render_template(
            "error.html",
            title="Error Loading Data",
            message=error_message,
            hint="Make sure DASHBOARD_INSTANTLY_API_KEY is set correctly in your .env file.",
        ), 502

    filtered = context['filtered_campaigns']
    table_campaigns = sort_campaigns(filtered, context['sort'], context['order'])

    # The dropdown a selection came from reopens after the page reloads
    dropdowns = {name: Dropdown() for name in FILTER_DROPDOWNS}
    reopen = request.args.get('open')
    if reopen in dropdowns:
        dropdowns[reopen].toggle()

    def filter_url(state: FilterState, dropdown: Optional[str] = None) -> str:
        """Dashboard URL for another filter state, keeping range and sort."""
        return url_for(
            'dashboard.home',
            start_date=context['start_date'],
            end_date=context['end_date'],
            sort=context['sort'],
            order=context['order'] if context['sort'] else None,
            open=dropdown,
            **state.to_query_args(),
        )

    def sort_url(column: str) -> str:
        """Dashboard URL sorting by column; clicking the active column flips order."""
        if column == context['sort']:
            order = 'asc' if context['order'] == 'desc' else 'desc'
        else:
            order = 'asc' if column == 'campaign_name' else 'desc'
        return url_for(
            'dashboard.home',
            start_date=context['start_date'],
            end_date=context['end_date'],
            sort=column,
            order=order,
            **context['filters'].to_query_args(),
        )

    return render_template(
        "dashboard.html",
        **context,
        filter_url=filter_url,
        dropdowns=dropdowns,
        sort_url=sort_url,
        status_options=STATUS_OPTIONS,
        sortable_columns=SORTABLE_COLUMNS,
        table_rows=build_table_rows(table_campaigns),
        chart_data=build_chart_data(filtered),
        bounce_warning_rate=BOUNCE_WARNING_RATE,
    )


@bp.route("/api/dashboard")
def dashboard_data():
    """
    JSON version of the dashboard for scripted consumers.

    Returns JSON:
        {
            "start_date": str, "end_date": str,
            "total_campaigns": int, "filtered_count": int,
            "summary": {...} or null,
            "campaigns": [...],
            "message": str or null
        }
    """
    context, error_message = load_dashboard_data()

    if error_message:
        return jsonify({'error': error_message}), 502

    filtered = sort_campaigns(context['filtered_campaigns'], context['sort'], context['order'])
    summary = context['summary']

    return jsonify({
        'start_date': context['start_date'],
        'end_date': context['end_date'],
        'total_campaigns': len(context['campaigns']),
        'filtered_count': len(filtered),
        'summary': summary.to_dict() if summary else None,
        'campaigns': [c.model_dump() for c in filtered],
        'message': context['empty_message'],
    })

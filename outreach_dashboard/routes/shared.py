"""
Shared helper functions used across dashboard routes.
"""

import calendar
import re
from datetime import date
from typing import Optional, Tuple

from flask import current_app, request

from outreach_dashboard.cache import AnalyticsQueryCache

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def get_analytics_cache() -> AnalyticsQueryCache:
    """Query cache created by create_app()."""
    return current_app.config['ANALYTICS_CACHE']


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's last day."""
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def default_date_range(today: Optional[date] = None) -> Tuple[str, str]:
    """Last month up to today, as ISO date strings."""
    today = today or date.today()
    return one_month_before(today).isoformat(), today.isoformat()


def get_date_range_from_args() -> Tuple[str, str]:
    """
    Returns (start_date, end_date) from ?start_date=&end_date= args.

    Each value falls back to the default range when missing or not YYYY-MM-DD.
    """
    default_start, default_end = default_date_range()

    start_date = request.args.get('start_date', '').strip()
    end_date = request.args.get('end_date', '').strip()

    if not _DATE_RE.match(start_date):
        start_date = default_start
    if not _DATE_RE.match(end_date):
        end_date = default_end

    return start_date, end_date

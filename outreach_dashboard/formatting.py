"""
Display formatting helpers, registered as Jinja filters in app.py.
"""

from typing import Optional

CHART_NAME_LIMIT = 20


def format_number(value: Optional[float]) -> str:
    """
    Compact number for metric cards.

    1_500_000 -> '1.5M', 2_300 -> '2.3K', 999 -> '999'
    """
    if value is None:
        return '—'
    v = float(value)
    if v >= 1_000_000:
        return f'{v / 1_000_000:.1f}M'
    if v >= 1_000:
        return f'{v / 1_000:.1f}K'
    if v.is_integer():
        return f'{int(v):,}'
    return f'{v:,.2f}'


def format_count(value: Optional[int]) -> str:
    """Full count with thousands separators, for table cells."""
    if value is None:
        return '—'
    return f'{value:,}'


def format_percent(value: Optional[float]) -> str:
    """One decimal place: 23.333 -> '23.3%'."""
    if value is None:
        return '—'
    return f'{float(value):.1f}%'


def truncate_name(name: str, limit: int = CHART_NAME_LIMIT) -> str:
    """Shorten long campaign names for chart axis labels."""
    if len(name) > limit:
        return name[:limit] + '...'
    return name

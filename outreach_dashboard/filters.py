"""
Campaign and status filters for the dashboard.

Both filters are inclusion filters over the fetched campaign list. An empty
selection means "no filter" for that dimension, not "match nothing".
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Sequence

from outreach_dashboard.models import STATUS_OPTIONS, CampaignRecord

CAMPAIGN_ARG = 'campaign'
STATUS_ARG = 'status'


def _toggle(selection: FrozenSet, value) -> FrozenSet:
    return selection - {value} if value in selection else selection | {value}


@dataclass(frozen=True)
class FilterState:
    """Selected campaign ids and status codes. Immutable; updates return a new state."""
    campaign_ids: FrozenSet[str] = field(default_factory=frozenset)
    statuses: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def has_active_filters(self) -> bool:
        return bool(self.campaign_ids or self.statuses)

    def apply(self, campaigns: Sequence[CampaignRecord]) -> List[CampaignRecord]:
        """
        Narrow campaigns by id first, then by status. A campaign must pass both.

        Args:
            campaigns: Unfiltered campaign list

        Returns:
            New list; input is untouched
        """
        filtered = list(campaigns)

        if self.campaign_ids:
            filtered = [c for c in filtered if c.campaign_id in self.campaign_ids]

        if self.statuses:
            filtered = [c for c in filtered if c.campaign_status in self.statuses]

        return filtered

    def toggle_campaign(self, campaign_id: str) -> 'FilterState':
        return replace(self, campaign_ids=_toggle(self.campaign_ids, campaign_id))

    def toggle_status(self, status: int) -> 'FilterState':
        return replace(self, statuses=_toggle(self.statuses, status))

    def select_all_campaigns(self, campaigns: Iterable[CampaignRecord]) -> 'FilterState':
        return replace(self, campaign_ids=frozenset(c.campaign_id for c in campaigns))

    def select_all_statuses(self) -> 'FilterState':
        return replace(self, statuses=frozenset(option.code for option in STATUS_OPTIONS))

    def clear_campaigns(self) -> 'FilterState':
        return replace(self, campaign_ids=frozenset())

    def clear_statuses(self) -> 'FilterState':
        return replace(self, statuses=frozenset())

    @classmethod
    def from_request_args(cls, args) -> 'FilterState':
        """
        Build state from repeated ?campaign=...&status=... query args.

        Args:
            args: werkzeug MultiDict (request.args)

        Returns:
            FilterState; non-integer status values are ignored
        """
        campaign_ids = frozenset(v for v in args.getlist(CAMPAIGN_ARG) if v)

        statuses = set()
        for raw in args.getlist(STATUS_ARG):
            try:
                statuses.add(int(raw))
            except (TypeError, ValueError):
                continue

        return cls(campaign_ids=campaign_ids, statuses=frozenset(statuses))

    def to_query_args(self) -> Dict[str, List]:
        """Inverse of from_request_args, for url_for(**args)."""
        args = {}
        if self.campaign_ids:
            args[CAMPAIGN_ARG] = sorted(self.campaign_ids)
        if self.statuses:
            args[STATUS_ARG] = sorted(self.statuses)
        return args


def selection_label(selected_count: int, total_count: int, noun: str, plural: str) -> str:
    """
    Dropdown button label.

    "All <plural>" when nothing or everything is selected,
    otherwise "N <noun|plural> Selected".
    """
    if selected_count == 0 or selected_count == total_count:
        return f"All {plural}"
    return f"{selected_count} {noun if selected_count == 1 else plural} Selected"


def campaign_filter_label(state: FilterState, campaigns: Sequence[CampaignRecord]) -> str:
    return selection_label(len(state.campaign_ids), len(campaigns), 'Campaign', 'Campaigns')


def status_filter_label(state: FilterState) -> str:
    return selection_label(len(state.statuses), len(STATUS_OPTIONS), 'Status', 'Statuses')


class DropdownState(Enum):
    CLOSED = 'closed'
    OPEN = 'open'


@dataclass
class Dropdown:
    """
    Open/closed state of a filter dropdown.

    CLOSED -> OPEN on trigger; OPEN -> CLOSED on trigger or a click outside.
    Selection toggles are only reachable while OPEN.

    The dashboard route sets the initial state of each dropdown from this
    class; the script in dashboard.html applies the same transitions in the
    browser.
    """
    state: DropdownState = DropdownState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is DropdownState.OPEN

    @property
    def can_select(self) -> bool:
        return self.is_open

    def toggle(self) -> DropdownState:
        self.state = DropdownState.CLOSED if self.is_open else DropdownState.OPEN
        return self.state

    def click_outside(self) -> DropdownState:
        self.state = DropdownState.CLOSED
        return self.state

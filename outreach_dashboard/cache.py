"""
In-memory query cache for campaign analytics.

Entries are keyed by AnalyticsQuery value, so two requests with equal
filters share one entry. Fresh data (default 5 minutes) is served without a
network call, and concurrent misses for one key share a single fetch.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Hashable, List, Optional

from outreach_dashboard.logging_config import setup_logging
from outreach_dashboard.models import CampaignRecord

logger = setup_logging(__name__)

DEFAULT_TTL_SECONDS = 300  # 5 minutes


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class QueryResult:
    """Observable state of one cache key."""
    status: QueryStatus
    data: Optional[List[CampaignRecord]] = None  # may be stale when status is ERROR
    error: Optional[BaseException] = None

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def is_error(self) -> bool:
        return self.status is QueryStatus.ERROR


class _Entry:
    def __init__(self):
        self.data: Optional[List[CampaignRecord]] = None
        self.fetched_at: Optional[float] = None
        self.error: Optional[BaseException] = None
        self.in_flight: Optional[threading.Event] = None
        self.settled_at: Optional[float] = None  # last fetch completion, success or error


class AnalyticsQueryCache:
    """
    Cache keyed by query value with a freshness window.

    Thread-safe: the entry map is guarded by a lock, and only one fetch per
    key is in flight at a time. There is no cancellation; a slow fetch for an
    old key lands in that key's entry and never touches other keys.
    """

    def __init__(
        self,
        fetcher: Callable[[Hashable], List[CampaignRecord]],
        ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            fetcher: Called with the query on a miss (e.g. client.get_campaign_analytics)
            ttl: Freshness window in seconds (default: 5 minutes)
            clock: Monotonic time source
        """
        self._fetcher = fetcher
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, _Entry] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, entry: _Entry) -> bool:
        return (
            entry.data is not None
            and entry.error is None
            and entry.fetched_at is not None
            and self._clock() - entry.fetched_at < self.ttl
        )

    def state(self, query: Hashable) -> QueryResult:
        """Current state for a key without triggering a fetch."""
        with self._lock:
            entry = self._entries.get(query)
            if entry is None:
                return QueryResult(QueryStatus.IDLE)
            return self._result(entry)

    def _evict_expired(self, keep: Hashable):
        """Remove settled entries older than the TTL. Caller holds the lock."""
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if key != keep
            and entry.in_flight is None
            and entry.settled_at is not None
            and now - entry.settled_at >= self.ttl
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    @staticmethod
    def _result(entry: _Entry) -> QueryResult:
        if entry.error is not None:
            return QueryResult(QueryStatus.ERROR, data=entry.data, error=entry.error)
        if entry.data is not None:
            return QueryResult(QueryStatus.SUCCESS, data=entry.data)
        if entry.in_flight is not None:
            return QueryResult(QueryStatus.LOADING)
        return QueryResult(QueryStatus.IDLE)

    def fetch(self, query: Hashable) -> QueryResult:
        """
        Get data for a query, fetching only when the cached entry is stale.

        Blocks until the data (or an error) is available. Errors are
        returned in the result, not raised, and are not retried.

        Args:
            query: Cache key, normally an AnalyticsQuery

        Returns:
            QueryResult with status SUCCESS or ERROR
        """
        with self._lock:
            self._evict_expired(keep=query)
            entry = self._entries.setdefault(query, _Entry())

            if self._is_fresh(entry):
                logger.debug(f"Cache hit: {query!r}")
                return QueryResult(QueryStatus.SUCCESS, data=entry.data)

            waiter = entry.in_flight
            if waiter is None:
                entry.in_flight = threading.Event()
                owner = True
            else:
                owner = False

        if not owner:
            logger.debug(f"Joining in-flight fetch: {query!r}")
            waiter.wait()
            with self._lock:
                return self._result(entry)

        return self._run_fetch(query, entry)

    def _run_fetch(self, query: Hashable, entry: _Entry) -> QueryResult:
        logger.info(f"Cache miss, fetching: {query!r}")
        data: Optional[List[CampaignRecord]] = None
        error: Optional[BaseException] = None
        try:
            data = self._fetcher(query)
        except Exception as e:
            logger.error(f"Fetch failed for {query!r}: {type(e).__name__}: {e}")
            error = e
        finally:
            # Waiters must be released even when the fetcher raises a BaseException
            with self._lock:
                if error is None and data is not None:
                    entry.data = data
                    entry.fetched_at = self._clock()
                    entry.error = None
                elif error is not None:
                    # keep previous data around as stale
                    entry.error = error
                entry.settled_at = self._clock()
                event, entry.in_flight = entry.in_flight, None
                result = self._result(entry)
            event.set()

        return result

    def invalidate(self, query: Optional[Hashable] = None):
        """Drop one entry, or everything when query is None."""
        with self._lock:
            if query is None:
                self._entries.clear()
            else:
                self._entries.pop(query, None)

    def size(self) -> int:
        """Get number of cached keys."""
        return len(self._entries)

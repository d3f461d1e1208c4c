"""Retained spot set: merge, dedup, age eviction and capacity bound.

The SpotAggregator exclusively owns the retained reports. Batches are merged
by identity key (last write wins), stale reports are evicted on every ingest
and whenever the retention window changes, and the set is trimmed to the
most recent ``max_capacity`` reports. Readers get immutable views.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .. import constants
from ..errors import MalformedReport
from ..utils import print_debug
from .callsign_info import CallsignResolver, PrefixResolver
from .filters import FilterConfig, filter_reports
from .models import Report, ReportKey, as_utc, report_key


@dataclass(frozen=True)
class SpotView:
    """Read-only result of a query.

    ``spots`` is every matching report, newest first. ``paths`` is the
    subset whose two stations both have coordinates.
    """

    spots: Tuple[Report, ...] = ()
    paths: Tuple[Report, ...] = ()


def _recency(report: Report):
    return (report.observed_at, report.ingested_at or report.observed_at)


class SpotAggregator:
    """Owns the authoritative set of retained reports.

    Example:
        aggregator = SpotAggregator(retention=timedelta(minutes=30))
        aggregator.ingest(batch)
        view = aggregator.query(FilterConfig(bands=["20m"]))
    """

    def __init__(
        self,
        retention: timedelta = timedelta(minutes=constants.DEFAULT_RETENTION_MINUTES),
        max_capacity: int = constants.DEFAULT_MAX_SPOTS,
        resolver: Optional[CallsignResolver] = None,
    ):
        self._check_retention(retention)
        self._check_capacity(max_capacity)
        self._retention = retention
        self._max_capacity = max_capacity
        self.resolver = resolver or PrefixResolver()
        self._spots: Dict[ReportKey, Report] = {}

    @staticmethod
    def _check_retention(retention: timedelta):
        if not isinstance(retention, timedelta) or retention <= timedelta(0):
            raise ValueError(f"Retention window must be a positive duration: {retention!r}")

    @staticmethod
    def _check_capacity(max_capacity: int):
        if max_capacity < 1:
            raise ValueError(f"Capacity must be at least 1: {max_capacity}")

    @property
    def retention(self) -> timedelta:
        return self._retention

    @property
    def max_capacity(self) -> int:
        return self._max_capacity

    @property
    def total_spots(self) -> int:
        return len(self._spots)

    def __len__(self):
        return len(self._spots)

    def __contains__(self, key):
        if isinstance(key, Report):
            key = report_key(key)
        return key in self._spots

    def get(self, key: ReportKey) -> Optional[Report]:
        return self._spots.get(key)

    def ingest(self, batch: Iterable[Any], now: Optional[datetime] = None) -> Dict[str, int]:
        """Merge a batch of raw records (or Report instances).

        New keys are inserted with ``ingested_at = now``; known keys are
        replaced by the incoming report while keeping the stored
        ``ingested_at``. Malformed records are skipped. Eviction and the
        capacity bound are applied after the whole batch has been merged.

        Args:
            batch: Raw records with canonical keys, or Report objects
            now: Current time (defaults to the wall clock, UTC)

        Returns:
            Stats dict: received, inserted, updated, skipped, expired,
            trimmed, total
        """
        now = as_utc(now)
        stats = {
            "received": 0,
            "inserted": 0,
            "updated": 0,
            "skipped": 0,
            "expired": 0,
            "trimmed": 0,
            "total": 0,
        }

        for record in batch or ():
            stats["received"] += 1
            try:
                report = record if isinstance(record, Report) else Report.from_raw(record, now)
            except MalformedReport as e:
                stats["skipped"] += 1
                print_debug(f"Skipping malformed spot: {e}", level=5)
                continue

            key = report_key(report)
            existing = self._spots.get(key)
            if existing is None:
                self._spots[key] = replace(report, ingested_at=now)
                stats["inserted"] += 1
            else:
                self._spots[key] = replace(report, ingested_at=existing.ingested_at)
                stats["updated"] += 1

        stats["expired"] = self._evict_expired(now)
        stats["trimmed"] = self._enforce_capacity()
        stats["total"] = len(self._spots)

        print_debug(
            f"Ingested {stats['received']} spots: {stats['inserted']} new, "
            f"{stats['updated']} updated, {stats['skipped']} skipped, "
            f"{stats['expired']} expired, {stats['trimmed']} trimmed "
            f"({stats['total']} retained)",
            level=4,
        )
        return stats

    def query(
        self,
        config: Optional[FilterConfig] = None,
        path_limit: Optional[int] = None,
    ) -> SpotView:
        """Filtered views of the retained set.

        Args:
            config: Filter criteria (None or empty matches everything)
            path_limit: Optional cap on the number of paths returned

        Returns:
            SpotView with spots newest first and the drawable paths
        """
        ordered = sorted(self._spots.values(), key=_recency, reverse=True)
        spots = filter_reports(ordered, config, self.resolver)
        paths = [r for r in spots if r.has_path]
        if path_limit is not None:
            paths = paths[:max(0, path_limit)]
        return SpotView(spots=tuple(spots), paths=tuple(paths))

    def set_retention_window(self, duration: timedelta, now: Optional[datetime] = None) -> int:
        """Change the retention window and evict what is now stale.

        Returns:
            Number of reports evicted

        Raises:
            ValueError: If the duration is not positive
        """
        self._check_retention(duration)
        self._retention = duration
        evicted = self._evict_expired(as_utc(now))
        if evicted:
            print_debug(
                f"Retention set to {duration}, evicted {evicted} spots", level=3
            )
        return evicted

    def set_max_capacity(self, max_capacity: int) -> int:
        """Change the capacity bound; returns the number of reports dropped."""
        self._check_capacity(max_capacity)
        self._max_capacity = max_capacity
        return self._enforce_capacity()

    def clear(self):
        self._spots.clear()

    def _evict_expired(self, now: datetime) -> int:
        cutoff = now - self._retention
        expired = [k for k, r in self._spots.items() if r.observed_at < cutoff]
        for key in expired:
            del self._spots[key]
        return len(expired)

    def _enforce_capacity(self) -> int:
        excess = len(self._spots) - self._max_capacity
        if excess <= 0:
            return 0
        oldest: List[Report] = sorted(self._spots.values(), key=_recency)[:excess]
        for report in oldest:
            del self._spots[report_key(report)]
        return excess

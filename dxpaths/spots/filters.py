"""Spot filter predicates.

A FilterConfig holds optional criteria; a report must satisfy every
criterion that is present. Zone and continent criteria are evaluated
against resolved callsign metadata and fail closed when it is unknown.
"""

from dataclasses import dataclass, fields
from functools import lru_cache
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional

from .callsign_info import CallsignResolver, PrefixResolver
from .models import Report

# camelCase names used by the web front end -> field names
_ALIASES = {
    "watchlistOnly": "watchlist_only",
    "excludeList": "exclude_list",
    "cqZones": "cq_zones",
    "ituZones": "itu_zones",
}


def _split(values: Any) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(",")
    return [str(v).strip() for v in values if str(v).strip()]


def _upper_set(values: Any) -> FrozenSet[str]:
    return frozenset(v.upper() for v in _split(values))


def _lower_set(values: Any) -> FrozenSet[str]:
    return frozenset(v.lower() for v in _split(values))


def _int_set(values: Any) -> FrozenSet[int]:
    result = set()
    for v in _split(values):
        try:
            result.add(int(v))
        except ValueError:
            raise ValueError(f"Zone must be a number: {v!r}") from None
    return frozenset(result)


@dataclass(frozen=True)
class FilterConfig:
    """Spot filter criteria; empty fields are not applied."""

    watchlist_only: bool = False
    watchlist: FrozenSet[str] = frozenset()
    exclude_list: FrozenSet[str] = frozenset()
    cq_zones: FrozenSet[int] = frozenset()
    itu_zones: FrozenSet[int] = frozenset()
    continents: FrozenSet[str] = frozenset()
    bands: FrozenSet[str] = frozenset()
    modes: FrozenSet[str] = frozenset()
    callsign: str = ""

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "watchlist_only", bool(self.watchlist_only))
        object.__setattr__(self, "watchlist", _upper_set(self.watchlist))
        object.__setattr__(self, "exclude_list", _upper_set(self.exclude_list))
        object.__setattr__(self, "cq_zones", _int_set(self.cq_zones))
        object.__setattr__(self, "itu_zones", _int_set(self.itu_zones))
        object.__setattr__(self, "continents", _upper_set(self.continents))
        object.__setattr__(self, "bands", _lower_set(self.bands))
        object.__setattr__(self, "modes", _upper_set(self.modes))
        object.__setattr__(self, "callsign", (self.callsign or "").strip().upper())

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FilterConfig":
        """Build from a settings mapping (snake_case or camelCase keys).

        Unknown keys are ignored.
        """
        if not data:
            return cls()
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in names and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def is_empty(self) -> bool:
        """True if no criterion would be applied."""
        return not (
            (self.watchlist_only and self.watchlist)
            or self.exclude_list
            or self.cq_zones
            or self.itu_zones
            or self.continents
            or self.bands
            or self.modes
            or self.callsign
        )

    @property
    def needs_resolver(self) -> bool:
        return bool(self.cq_zones or self.itu_zones or self.continents)


@lru_cache(maxsize=1)
def default_resolver() -> PrefixResolver:
    """Shared built-in prefix resolver for callers that do not supply one."""
    return PrefixResolver()


def matches(
    report: Report,
    config: Optional[FilterConfig],
    resolver: Optional[CallsignResolver] = None,
) -> bool:
    """True if ``report`` satisfies every criterion present in ``config``.

    Criteria, in evaluation order:
    - watchlist: destination call contains a watchlist entry (only when
      watchlist_only is set)
    - exclude list: destination call starts with no excluded prefix
    - CQ / ITU zone: origin station's zone is selected
    - continents: origin is on a selected continent and the destination is
      on a continent outside the selection
    - bands, modes: report band / mode is selected
    - callsign: substring of either station's call
    """
    if config is None:
        return True

    dest = report.destination_call
    origin = report.origin_call

    if config.watchlist_only and config.watchlist:
        if not any(entry in dest for entry in config.watchlist):
            return False

    if config.exclude_list:
        if any(dest.startswith(prefix) for prefix in config.exclude_list):
            return False

    if config.needs_resolver:
        resolver = resolver or default_resolver()
        origin_info = resolver.lookup(origin)

        if config.cq_zones and origin_info.cq_zone not in config.cq_zones:
            return False

        if config.itu_zones and origin_info.itu_zone not in config.itu_zones:
            return False

        if config.continents:
            if origin_info.continent not in config.continents:
                return False
            dest_continent = resolver.lookup(dest).continent
            if dest_continent is None or dest_continent in config.continents:
                return False

    if config.bands and report.band.lower() not in config.bands:
        return False

    if config.modes and (not report.mode or report.mode.upper() not in config.modes):
        return False

    if config.callsign:
        if config.callsign not in origin and config.callsign not in dest:
            return False

    return True


def filter_reports(
    reports: Iterable[Report],
    config: Optional[FilterConfig],
    resolver: Optional[CallsignResolver] = None,
) -> List[Report]:
    """Reports matching ``config``, in their original order."""
    if config is None or config.is_empty():
        return list(reports)
    return [r for r in reports if matches(r, config, resolver)]

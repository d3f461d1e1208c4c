"""Activity summary over a set of reports."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .bands import UNKNOWN_BAND
from .models import Report


@dataclass
class ActivitySummary:
    """Counts and highlights for a list of reports."""

    count: int = 0
    bands: List[str] = field(default_factory=list)  # First-seen order
    modes: List[str] = field(default_factory=list)
    best: Optional[Report] = None  # Highest SNR
    origin_stations: int = 0
    destination_stations: int = 0
    paths: int = 0

    @property
    def best_snr(self) -> Optional[float]:
        return self.best.snr if self.best else None


def summarize(reports: Iterable[Report]) -> ActivitySummary:
    """Summarize reports: bands and modes heard, best signal, station counts.

    Stations are counted by call and locator, so a portable station heard
    from two grids counts twice.
    """
    summary = ActivitySummary()
    origins = set()
    destinations = set()

    for report in reports:
        summary.count += 1
        if report.band != UNKNOWN_BAND and report.band not in summary.bands:
            summary.bands.append(report.band)
        if report.mode and report.mode not in summary.modes:
            summary.modes.append(report.mode)
        if report.snr is not None and (
            summary.best is None or report.snr > summary.best.snr
        ):
            summary.best = report
        origins.add((report.origin_call, report.origin_locator))
        destinations.add((report.destination_call, report.destination_locator))
        if report.has_path:
            summary.paths += 1

    summary.origin_stations = len(origins)
    summary.destination_stations = len(destinations)
    return summary

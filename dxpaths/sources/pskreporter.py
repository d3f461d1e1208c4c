"""PSKReporter reception reports for one callsign.

The relay caches PSKReporter queries (to respect its rate limits) and
returns both directions at /api/pskreporter/{call}?minutes=N:

    {"tx": {"reports": [...], "rateLimited": false, "error": null},
     "rx": {"reports": [...], "rateLimited": false, "error": null},
     "error": null}

``tx`` holds stations that heard the callsign, ``rx`` stations the callsign
heard. Each report has sender/receiver calls and grids, freq (Hz), snr,
mode, band and timestamp (ms). The receiver is the origin, the sender the
destination.
"""

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from .. import constants
from ..utils import print_debug
from .base import SpotSource

DIRECTIONS = ("tx", "rx", "both")
MIN_MINUTES = 5
MAX_MINUTES = 60


class PSKReporterSource(SpotSource):
    """Reception reports for a single callsign from PSKReporter."""

    name = "pskreporter"
    default_interval = constants.PSKREPORTER_INTERVAL

    def __init__(self, base_url: str = constants.DEFAULT_SERVER_URL,
                 callsign: str = constants.NO_CALL, minutes: int = 15,
                 direction: str = "both", timeout: int = constants.HTTP_TIMEOUT):
        super().__init__(base_url, timeout)
        self.callsign = constants.NO_CALL
        self.minutes = 15
        self.direction = "both"
        self.configure(callsign=callsign, minutes=minutes, direction=direction)

    def configure(self, callsign: Optional[str] = None, minutes: Optional[int] = None,
                  direction: Optional[str] = None, **settings) -> bool:
        """Update query settings.

        Args:
            callsign: Station to report on
            minutes: Time window, 5-60 minutes
            direction: "tx", "rx" or "both"

        Returns:
            True if any setting changed

        Raises:
            ValueError: If a value is out of range or unknown
        """
        super().configure(**settings)
        changed = False

        if callsign is not None:
            call = callsign.strip().upper()
            changed |= call != self.callsign
            self.callsign = call

        if minutes is not None:
            minutes = int(minutes)
            if not MIN_MINUTES <= minutes <= MAX_MINUTES:
                raise ValueError(
                    f"Invalid minutes {minutes}. Must be {MIN_MINUTES}-{MAX_MINUTES}"
                )
            changed |= minutes != self.minutes
            self.minutes = minutes

        if direction is not None:
            direction = direction.strip().lower()
            if direction not in DIRECTIONS:
                raise ValueError(f"Invalid direction '{direction}'. Valid: {', '.join(DIRECTIONS)}")
            changed |= direction != self.direction
            self.direction = direction

        return changed

    def _build_url(self) -> Optional[str]:
        if not self.callsign or self.callsign == constants.NO_CALL:
            print_debug("pskreporter: no callsign configured, skipping fetch", level=3)
            return None
        return (
            f"{self.base_url}/api/pskreporter/{quote(self.callsign, safe='')}"
            f"?minutes={self.minutes}"
        )

    def _parse_payload(self, payload: Any) -> List[Dict[str, Any]]:
        if not isinstance(payload, Mapping):
            raise ValueError(f"expected an object, got {type(payload).__name__}")

        wanted = ("tx", "rx") if self.direction == "both" else (self.direction,)
        records: List[Dict[str, Any]] = []
        rate_limited = False
        error = payload.get("error")

        for direction in ("tx", "rx"):
            section = payload.get(direction) or {}
            if not isinstance(section, Mapping):
                continue
            rate_limited = rate_limited or bool(section.get("rateLimited"))
            error = error or section.get("error")
            if direction in wanted:
                records.extend(self._translate_section(section.get("reports") or [], direction))

        self.rate_limited = rate_limited
        if error:
            # The relay can answer 200 with an error next to cached data
            print_debug(f"pskreporter: relay reported error: {error}", level=2)
            self.last_error = str(error)
        return records

    def _translate_section(self, reports: Any, direction: str) -> List[Dict[str, Any]]:
        records = self._translate_all(reports)
        # lat/lon locate the far end: the receiver for tx, the sender for rx
        end = "origin" if direction == "tx" else "destination"
        for record in records:
            record[f"{end}_lat"] = record.pop("lat")
            record[f"{end}_lon"] = record.pop("lon")
        return records

    def _translate(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "origin_call": item.get("receiver"),
            "destination_call": item.get("sender"),
            "frequency_hz": item.get("freq"),
            "observed_at": item.get("timestamp"),
            "snr": item.get("snr"),
            "mode": item.get("mode"),
            "source": self.name,
            "origin_locator": item.get("receiverGrid"),
            "destination_locator": item.get("senderGrid"),
            "lat": item.get("lat"),
            "lon": item.get("lon"),
        }

    def get_source_info(self) -> dict:
        info = super().get_source_info()
        info.update({
            "callsign": self.callsign,
            "minutes": self.minutes,
            "direction": self.direction,
        })
        return info

"""WSPR propagation spots.

The relay serves recent WSPR spots at /api/wspr/heatmap?minutes=N&band=B as
``{"spots": [...]}``, each with sender/receiver calls, grids and
coordinates, freq (Hz) or freqMHz, band, snr and timestamp. The receiver is
the origin, the sender the destination.
"""

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from .. import constants
from .base import SpotSource

MIN_MINUTES = 5
MAX_MINUTES = 240


def _wspr_frequency(item: Mapping[str, Any]) -> Optional[Any]:
    freq = item.get("freq")
    if freq not in (None, ""):
        return freq
    mhz = item.get("freqMHz")
    if mhz in (None, ""):
        return None
    try:
        return float(mhz) * 1_000_000
    except (TypeError, ValueError):
        return None


class WSPRSource(SpotSource):
    """Global WSPR spots, optionally limited to one band."""

    name = "wspr"
    default_interval = constants.WSPR_INTERVAL

    def __init__(self, base_url: str = constants.DEFAULT_SERVER_URL,
                 minutes: int = 30, band: str = "all",
                 timeout: int = constants.HTTP_TIMEOUT):
        super().__init__(base_url, timeout)
        self.minutes = 30
        self.band = "all"
        self.configure(minutes=minutes, band=band)

    def configure(self, minutes: Optional[int] = None, band: Optional[str] = None,
                  **settings) -> bool:
        """Update the time window (5-240 minutes) and band ("all" or e.g. "20m")."""
        super().configure(**settings)
        changed = False

        if minutes is not None:
            minutes = int(minutes)
            if not MIN_MINUTES <= minutes <= MAX_MINUTES:
                raise ValueError(
                    f"Invalid minutes {minutes}. Must be {MIN_MINUTES}-{MAX_MINUTES}"
                )
            changed |= minutes != self.minutes
            self.minutes = minutes

        if band is not None:
            band = band.strip().lower() or "all"
            changed |= band != self.band
            self.band = band

        return changed

    def _build_url(self) -> Optional[str]:
        query = urlencode({"minutes": self.minutes, "band": self.band})
        return f"{self.base_url}/api/wspr/heatmap?{query}"

    def _parse_payload(self, payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, Mapping):
            payload = payload.get("spots") or []
        return self._translate_all(payload)

    def _translate(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "origin_call": item.get("receiver"),
            "destination_call": item.get("sender"),
            "frequency_hz": _wspr_frequency(item),
            "observed_at": item.get("timestamp"),
            "snr": item.get("snr"),
            "mode": "WSPR",
            "source": self.name,
            "origin_locator": item.get("receiverGrid"),
            "destination_locator": item.get("senderGrid"),
            "origin_lat": item.get("receiverLat"),
            "origin_lon": item.get("receiverLon"),
            "destination_lat": item.get("senderLat"),
            "destination_lon": item.get("senderLon"),
        }

    def get_source_info(self) -> dict:
        info = super().get_source_info()
        info.update({"minutes": self.minutes, "band": self.band})
        return info

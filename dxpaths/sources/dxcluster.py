"""DX cluster spot relay.

The relay server exposes recent cluster spots with resolved coordinates at
/api/dxcluster/paths as a JSON list:

    [{"dxCall": "G0XYZ", "freq": "14097.0", "spotter": "K1ABC",
      "comment": "FT8 -05dB", "time": "1407z", "timestamp": 1718000000000,
      "spotterLat": 41.5, "spotterLon": -71.0, "spotterGrid": "FN41",
      "dxLat": 51.5, "dxLon": -0.1, "dxGrid": "IO91"}, ...]

Frequencies are in kHz. The spotter is the origin, the DX the destination.
"""

from typing import Any, Dict, List, Mapping, Optional

from .. import constants
from .base import SpotSource


def khz_to_hz(value: Any) -> Optional[float]:
    """Cluster frequency (kHz, number or string) to Hz; None if unparseable."""
    if value in (None, ""):
        return None
    try:
        return float(str(value).strip()) * 1000.0
    except ValueError:
        return None


class DXClusterSource(SpotSource):
    """Spots from the DX cluster relay endpoint."""

    name = "dxcluster"
    default_interval = constants.DX_CLUSTER_INTERVAL

    def _build_url(self) -> Optional[str]:
        return f"{self.base_url}/api/dxcluster/paths"

    def _parse_payload(self, payload: Any) -> List[Dict[str, Any]]:
        # Some relay versions wrap the list as {"paths": [...]}
        if isinstance(payload, Mapping):
            payload = payload.get("paths", payload.get("spots"))
        return self._translate_all(payload)

    def _translate(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "origin_call": item.get("spotter"),
            "destination_call": item.get("dxCall"),
            "frequency_hz": khz_to_hz(item.get("freq")),
            "observed_at": item.get("timestamp"),
            "comment": item.get("comment") or "",
            "mode": item.get("mode"),
            "snr": item.get("snr"),
            "source": self.name,
            "origin_locator": item.get("spotterGrid"),
            "destination_locator": item.get("dxGrid"),
            "origin_lat": item.get("spotterLat"),
            "origin_lon": item.get("spotterLon"),
            "destination_lat": item.get("dxLat"),
            "destination_lon": item.get("dxLon"),
        }

"""Spot data model.

Defines:
- Report: a single propagation observation between two stations
- report_key: the identity key used to deduplicate reports
- parse_timestamp: lenient conversion of feed timestamps to aware UTC datetimes
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from .. import constants
from ..errors import MalformedReport
from ..geo.great_circle import GreatCirclePath, distance_km, initial_bearing
from ..geo.locator import GeoPoint, decode_locator, encode_locator
from .bands import band_from_frequency, detect_mode
from .signal import SignalBand, classify_snr

ReportKey = Tuple[str, float, str]

# Epoch values above this are milliseconds (year 5138 in seconds)
_EPOCH_MS_THRESHOLD = 100_000_000_000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> datetime:
    """Aware UTC datetime; None means now, naive values are taken as UTC."""
    if dt is None:
        return utc_now()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Convert a feed timestamp to an aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC), ISO 8601 strings
    (a trailing "Z" is allowed), and epoch seconds or milliseconds as
    numbers or numeric strings.

    Raises:
        ValueError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty timestamp")
        try:
            value = float(text)
        except ValueError:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            dt = datetime.fromisoformat(text)
            return parse_timestamp(dt)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"Not a timestamp: {value!r}")
        seconds = value / 1000.0 if abs(value) >= _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e

    raise ValueError(f"Not a timestamp: {value!r}")


# camelCase spellings accepted for the canonical raw keys
_RAW_ALIASES = {
    "origin_call": "originCall",
    "destination_call": "destinationCall",
    "frequency_hz": "frequencyHz",
    "observed_at": "observedAt",
    "origin_locator": "originLocator",
    "destination_locator": "destinationLocator",
    "origin_lat": "originLat",
    "origin_lon": "originLon",
    "destination_lat": "destinationLat",
    "destination_lon": "destinationLon",
}


def _raw_get(record: Mapping[str, Any], key: str) -> Any:
    value = record.get(key)
    if value is None and key in _RAW_ALIASES:
        value = record.get(_RAW_ALIASES[key])
    return value


def _point_from(lat: Any, lon: Any) -> Optional[GeoPoint]:
    """GeoPoint from loose lat/lon values, or None if absent/invalid."""
    if lat in (None, "") or lon in (None, ""):
        return None
    try:
        return GeoPoint(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


@dataclass
class Report:
    """A single propagation observation.

    The origin is the station that heard (spotter/receiver), the destination
    is the station that was heard (DX/sender).
    """

    origin_call: str
    destination_call: str
    frequency_hz: float
    observed_at: datetime
    snr: Optional[float] = None
    mode: Optional[str] = None
    comment: str = ""
    source: str = ""
    origin_locator: Optional[str] = None
    destination_locator: Optional[str] = None
    origin_point: Optional[GeoPoint] = None
    destination_point: Optional[GeoPoint] = None
    band: str = field(default="", init=False)
    ingested_at: Optional[datetime] = None

    def __post_init__(self):
        self.origin_call = (self.origin_call or "").upper().strip()
        self.destination_call = (self.destination_call or "").upper().strip()
        self.frequency_hz = float(self.frequency_hz)

        self.observed_at = as_utc(self.observed_at)

        self.origin_locator = (self.origin_locator or "").strip().upper() or None
        self.destination_locator = (self.destination_locator or "").strip().upper() or None

        # Locator and point fill in for each other
        if self.origin_point is None:
            self.origin_point = decode_locator(self.origin_locator)
        elif self.origin_locator is None:
            self.origin_locator = encode_locator(*self.origin_point.as_tuple()).upper()
        if self.destination_point is None:
            self.destination_point = decode_locator(self.destination_locator)
        elif self.destination_locator is None:
            self.destination_locator = encode_locator(*self.destination_point.as_tuple()).upper()

        self.band = band_from_frequency(self.frequency_hz)
        self.mode = self.mode.upper().strip() if self.mode else detect_mode(self.comment)

    @property
    def key(self) -> ReportKey:
        return report_key(self)

    @property
    def signal(self) -> SignalBand:
        return classify_snr(self.snr)

    @property
    def has_path(self) -> bool:
        """True if both ends have coordinates, so a path can be drawn."""
        return self.origin_point is not None and self.destination_point is not None

    @property
    def distance_km(self) -> Optional[float]:
        if not self.has_path:
            return None
        return distance_km(self.origin_point, self.destination_point)

    @property
    def bearing(self) -> Optional[float]:
        """Initial bearing from origin towards destination in degrees."""
        if not self.has_path:
            return None
        return initial_bearing(self.origin_point, self.destination_point)

    def path(self, steps: int = constants.GREAT_CIRCLE_STEPS) -> Optional[GreatCirclePath]:
        """Great circle polyline from origin to destination, or None."""
        if not self.has_path:
            return None
        return GreatCirclePath(self.origin_point, self.destination_point, steps)

    def age_minutes(self, now: Optional[datetime] = None) -> int:
        """Whole minutes since the observation (0 for future timestamps)."""
        now = as_utc(now)
        seconds = (now - self.observed_at).total_seconds()
        return max(0, int(seconds // 60))

    @classmethod
    def from_raw(cls, record: Mapping[str, Any], now: Optional[datetime] = None) -> "Report":
        """Build a Report from a raw record with canonical keys (or their camelCase forms).

        Raises:
            MalformedReport: If an identity field is missing, or the
                frequency or timestamp cannot be parsed
        """
        if not isinstance(record, Mapping):
            raise MalformedReport(f"Record is not a mapping: {type(record).__name__}")

        origin = str(_raw_get(record, "origin_call") or "").strip()
        destination = str(_raw_get(record, "destination_call") or "").strip()
        if not origin or not destination:
            raise MalformedReport(
                f"Missing station call (origin={origin!r}, destination={destination!r})"
            )

        raw_freq = _raw_get(record, "frequency_hz")
        if raw_freq in (None, ""):
            raise MalformedReport(f"Missing frequency for {destination} de {origin}")
        frequency = _optional_float(raw_freq)
        if frequency is None or frequency <= 0:
            raise MalformedReport(f"Bad frequency {raw_freq!r} for {destination} de {origin}")

        raw_time = _raw_get(record, "observed_at")
        if raw_time in (None, ""):
            observed_at = as_utc(now)
        else:
            try:
                observed_at = parse_timestamp(raw_time)
            except ValueError as e:
                raise MalformedReport(f"Bad timestamp {raw_time!r}: {e}") from e

        try:
            return cls(
                origin_call=origin,
                destination_call=destination,
                frequency_hz=frequency,
                observed_at=observed_at,
                snr=_optional_float(_raw_get(record, "snr")),
                mode=str(_raw_get(record, "mode") or "") or None,
                comment=str(_raw_get(record, "comment") or ""),
                source=str(_raw_get(record, "source") or ""),
                origin_locator=str(_raw_get(record, "origin_locator") or "") or None,
                destination_locator=str(_raw_get(record, "destination_locator") or "") or None,
                origin_point=_point_from(
                    _raw_get(record, "origin_lat"), _raw_get(record, "origin_lon")
                ),
                destination_point=_point_from(
                    _raw_get(record, "destination_lat"), _raw_get(record, "destination_lon")
                ),
            )
        except (TypeError, ValueError) as e:
            raise MalformedReport(f"Unusable spot {destination} de {origin}: {e}") from e


def report_key(report: Report) -> ReportKey:
    """Identity of a report: (destination call, frequency in Hz, origin call).

    Reports with equal keys are the same logical spot.
    """
    return (report.destination_call, report.frequency_hz, report.origin_call)

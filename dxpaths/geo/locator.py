"""Maidenhead locator conversions.

Provides:
- GeoPoint: immutable latitude/longitude value
- decode_locator / parse_locator: locator -> centre of the grid cell
- encode_locator: latitude/longitude -> 6-character locator
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import LocatorError

# ASCII only: str.isdigit() also accepts superscripts that int() rejects
DIGITS = "0123456789"


@dataclass(frozen=True)
class GeoPoint:
    """A point on the Earth's surface in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")

    def as_tuple(self):
        """Return (lat, lon), the order map polylines expect."""
        return (self.latitude, self.longitude)


def parse_locator(locator: str) -> GeoPoint:
    """Convert a Maidenhead locator to the centre of its cell.

    Supports 4 and 6 character locators; characters beyond the sixth are
    ignored:
    - Field (chars 1-2): A-R, 20° lon x 10° lat
    - Square (chars 3-4): 0-9, 2° lon x 1° lat
    - Subsquare (chars 5-6): A-X, 5' lon x 2.5' lat

    Args:
        locator: Maidenhead locator, case-insensitive (e.g. "FN31", "fn31pr")

    Returns:
        GeoPoint at the centre of the resolved cell

    Raises:
        LocatorError: If the locator is too short or malformed
    """
    if not locator or len(locator.strip()) < 4:
        raise LocatorError(f"Locator must have at least 4 characters: {locator!r}")

    grid = locator.strip().upper()

    field_lon = ord(grid[0]) - ord('A')
    field_lat = ord(grid[1]) - ord('A')
    if not (0 <= field_lon <= 17 and 0 <= field_lat <= 17):
        raise LocatorError(f"Field must be A-R: {grid[:2]}")

    if not (grid[2] in DIGITS and grid[3] in DIGITS):
        raise LocatorError(f"Characters 3-4 must be digits: {grid[2:4]}")

    lon = field_lon * 20 - 180 + int(grid[2]) * 2
    lat = field_lat * 10 - 90 + int(grid[3])

    if len(grid) >= 6:
        subsq_lon = ord(grid[4]) - ord('A')
        subsq_lat = ord(grid[5]) - ord('A')
        if not (0 <= subsq_lon <= 23 and 0 <= subsq_lat <= 23):
            raise LocatorError(f"Subsquare must be A-X: {grid[4:6]}")

        # Centre of a 2/24° x 1/24° subsquare
        lon += subsq_lon * (2.0 / 24) + (1.0 / 24)
        lat += subsq_lat * (1.0 / 24) + (0.5 / 24)
    else:
        # Centre of a 2° x 1° square
        lon += 1
        lat += 0.5

    return GeoPoint(latitude=lat, longitude=lon)


def decode_locator(locator: Optional[str]) -> Optional[GeoPoint]:
    """Lenient locator decode: None instead of an exception.

    Spot feeds routinely carry blank, truncated or garbled locators; those
    simply yield no coordinate.
    """
    try:
        return parse_locator(locator)
    except LocatorError:
        return None


def is_valid_locator(text: Optional[str]) -> bool:
    """True if ``text`` decodes as a 4 or 6 character locator."""
    return decode_locator(text) is not None


def encode_locator(lat: float, lon: float) -> str:
    """Convert latitude/longitude to a 6-character Maidenhead locator.

    Args:
        lat: Latitude in decimal degrees (-90 to +90)
        lon: Longitude in decimal degrees (-180 to +180)

    Returns:
        Locator such as "FN31pr" (field/square upper case, subsquare lower)
    """
    # Shift to 0-360 / 0-180, nudging the upper bound back inside the grid
    lon_adj = min(lon + 180, 360 - 1e-9)
    lat_adj = min(lat + 90, 180 - 1e-9)

    field_lon = int(lon_adj / 20)
    field_lat = int(lat_adj / 10)

    square_lon = int((lon_adj % 20) / 2)
    square_lat = int(lat_adj % 10)

    # 2° = 120', so 120/24 = 5' per subsquare; 1° = 60', 60/24 = 2.5'
    subsq_lon = int(((lon_adj % 2) * 60) / 5)
    subsq_lat = int(((lat_adj % 1) * 60) / 2.5)

    return (
        chr(ord("A") + field_lon)
        + chr(ord("A") + field_lat)
        + str(square_lon)
        + str(square_lat)
        + chr(ord("a") + subsq_lon)
        + chr(ord("a") + subsq_lat)
    )

"""Great circle geometry between two stations.

Paths are produced by spherical linear interpolation of the two endpoints
on the unit sphere, which gives the curved line a flat map needs to show
the true shortest route.
"""

import math
from collections.abc import Sequence

from .. import constants
from .locator import GeoPoint

# Earth's mean radius in kilometres
EARTH_RADIUS_KM = 6371.0

# Endpoints closer than this (unit sphere chord, or sine of the separation)
# count as coincident; the same distance from the antipode counts as antipodal
DEGENERATE_EPSILON = 1e-9


def _to_vector(point: GeoPoint):
    lat = math.radians(point.latitude)
    lon = math.radians(point.longitude)
    return (
        math.cos(lat) * math.cos(lon),
        math.cos(lat) * math.sin(lon),
        math.sin(lat),
    )


def _chord(u, v) -> float:
    return math.sqrt(sum((p - q) ** 2 for p, q in zip(u, v)))


def _to_point(x: float, y: float, z: float) -> GeoPoint:
    lat = math.degrees(math.atan2(z, math.sqrt(x * x + y * y)))
    lon = math.degrees(math.atan2(y, x))
    # atan2 can land a hair outside the valid range through rounding
    return GeoPoint(
        latitude=max(-90.0, min(90.0, lat)),
        longitude=max(-180.0, min(180.0, lon)),
    )


def angular_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Central angle between two points in radians (spherical law of cosines)."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlon = math.radians(b.longitude - a.longitude)
    cos_d = (
        math.sin(lat1) * math.sin(lat2)
        + math.cos(lat1) * math.cos(lat2) * math.cos(dlon)
    )
    return math.acos(max(-1.0, min(1.0, cos_d)))


class GreatCirclePath(Sequence):
    """Lazily evaluated great circle polyline from ``start`` to ``end``.

    Holds ``steps + 1`` points; index 0 is exactly ``start`` and the last
    index is exactly ``end``. Points are computed on access, so the path can
    be iterated any number of times without storing the polyline.
    """

    def __init__(self, start: GeoPoint, end: GeoPoint, steps: int):
        if steps < 1:
            raise ValueError(f"steps must be >= 1, got {steps}")

        self.start = start
        self.end = end
        self.steps = steps

        self._a = _to_vector(start)
        self._b = _to_vector(end)
        self._d = angular_distance(start, end)
        self._sin_d = math.sin(self._d)

        if self.is_antipodal:
            self._tangent = self._antipodal_tangent()

    @property
    def is_coincident(self) -> bool:
        if _chord(self._a, self._b) < DEGENERATE_EPSILON:
            return True
        return self._d < math.pi / 2 and self._sin_d < DEGENERATE_EPSILON

    @property
    def is_antipodal(self) -> bool:
        if _chord(self._a, tuple(-c for c in self._b)) < DEGENERATE_EPSILON:
            return True
        return self._d >= math.pi / 2 and self._sin_d < DEGENERATE_EPSILON

    def _antipodal_tangent(self):
        """Unit vector perpendicular to ``start`` used to pick a route.

        Every great circle through two antipodes is equally short, so the
        path runs along the start station's meridian, heading north. At the
        poles the meridian is undefined and the prime meridian is used.
        """
        ax, ay, az = self._a
        horizontal = math.sqrt(ax * ax + ay * ay)
        if horizontal < DEGENERATE_EPSILON:
            # Pole: tangent along the prime meridian
            return (1.0, 0.0, 0.0)
        # Northward unit tangent on the start meridian
        return (-az * ax / horizontal, -az * ay / horizontal, horizontal)

    def _point_at(self, index: int) -> GeoPoint:
        if index == 0:
            return self.start
        if index == self.steps:
            return self.end
        if self.is_coincident:
            return self.start

        f = index / self.steps

        if self.is_antipodal:
            angle = f * math.pi
            c, s = math.cos(angle), math.sin(angle)
            tx, ty, tz = self._tangent
            ax, ay, az = self._a
            return _to_point(c * ax + s * tx, c * ay + s * ty, c * az + s * tz)

        weight_a = math.sin((1 - f) * self._d) / self._sin_d
        weight_b = math.sin(f * self._d) / self._sin_d
        ax, ay, az = self._a
        bx, by, bz = self._b
        return _to_point(
            weight_a * ax + weight_b * bx,
            weight_a * ay + weight_b * by,
            weight_a * az + weight_b * bz,
        )

    def __len__(self) -> int:
        return self.steps + 1

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._point_at(i) for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("great circle path index out of range")
        return self._point_at(index)

    def __iter__(self):
        for index in range(self.steps + 1):
            yield self._point_at(index)

    def __repr__(self):
        return (
            f"GreatCirclePath(start={self.start}, end={self.end}, "
            f"steps={self.steps})"
        )

    def as_latlon_list(self):
        """Polyline as ``[[lat, lon], ...]`` for map consumers."""
        return [[p.latitude, p.longitude] for p in self]


def interpolate_great_circle(a: GeoPoint, b: GeoPoint,
                             steps: int = constants.GREAT_CIRCLE_STEPS) -> GreatCirclePath:
    """Great circle path between two points with ``steps`` segments.

    Args:
        a: Start point (index 0 of the result)
        b: End point (last index of the result)
        steps: Number of segments, must be >= 1 (result has steps + 1 points)

    Returns:
        GreatCirclePath, a restartable sequence of GeoPoint
    """
    return GreatCirclePath(a, b, steps)


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great circle distance in kilometres (haversine formula)."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def initial_bearing(a: GeoPoint, b: GeoPoint) -> float:
    """Initial great circle bearing from ``a`` towards ``b``, degrees 0-360."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    y = math.sin(dlon) * math.cos(lat2)
    x = (math.cos(lat1) * math.sin(lat2) -
         math.sin(lat1) * math.cos(lat2) * math.cos(dlon))
    return math.degrees(math.atan2(y, x)) % 360

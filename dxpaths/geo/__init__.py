"""Geodesy helpers: Maidenhead locators and great circle paths."""

from .locator import GeoPoint, decode_locator, encode_locator, is_valid_locator, parse_locator
from .great_circle import (
    GreatCirclePath, angular_distance, distance_km, initial_bearing, interpolate_great_circle
)

__all__ = [
    'GeoPoint', 'decode_locator', 'encode_locator', 'is_valid_locator', 'parse_locator',
    'GreatCirclePath', 'angular_distance', 'distance_km', 'initial_bearing',
    'interpolate_great_circle',
]

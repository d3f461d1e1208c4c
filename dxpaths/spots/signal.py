"""Signal strength classification for spot paths.

Maps an SNR reading to one of a fixed set of bands, each carrying the color
and line weight used when a path is drawn. Intervals are half-open: a
reading sitting exactly on a threshold belongs to the stronger band.
"""

from enum import Enum
from typing import Optional


class SignalBand(Enum):
    """SNR band with its display color and relative rendering weight."""

    UNKNOWN = ("Unknown", "#888888", 1.0)
    VERY_WEAK = ("Very Weak", "#ff0000", 1.0)
    WEAK = ("Weak", "#ff6600", 1.5)
    MODERATE = ("Moderate", "#ffaa00", 2.0)
    GOOD = ("Good", "#ffff00", 2.5)
    EXCELLENT = ("Excellent", "#00ff00", 3.0)

    def __init__(self, label: str, color: str, weight: float):
        self.label = label
        self.color = color
        self.weight = weight

    @classmethod
    def ordered(cls):
        """Bands from weakest to strongest, unknown first (legend order)."""
        return [cls.UNKNOWN, cls.VERY_WEAK, cls.WEAK, cls.MODERATE, cls.GOOD, cls.EXCELLENT]


# Lower bound (inclusive) of each band above VERY_WEAK, strongest first
SNR_THRESHOLDS = [
    (5.0, SignalBand.EXCELLENT),
    (0.0, SignalBand.GOOD),
    (-10.0, SignalBand.MODERATE),
    (-20.0, SignalBand.WEAK),
]


def classify_snr(snr: Optional[float]) -> SignalBand:
    """Classify an SNR in dB; None maps to SignalBand.UNKNOWN."""
    if snr is None:
        return SignalBand.UNKNOWN
    for lower, band in SNR_THRESHOLDS:
        if snr >= lower:
            return band
    return SignalBand.VERY_WEAK

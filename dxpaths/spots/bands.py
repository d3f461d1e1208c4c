"""Band and mode classification for spot frequencies and comments."""

import re
from typing import Optional

UNKNOWN_BAND = "Unknown"

# IARU amateur allocations (Hz), widest regional edges
BAND_EDGES = [
    ("160m", 1_800_000, 2_000_000),
    ("80m", 3_500_000, 4_000_000),
    ("60m", 5_250_000, 5_450_000),
    ("40m", 7_000_000, 7_300_000),
    ("30m", 10_100_000, 10_150_000),
    ("20m", 14_000_000, 14_350_000),
    ("17m", 18_068_000, 18_168_000),
    ("15m", 21_000_000, 21_450_000),
    ("12m", 24_890_000, 24_990_000),
    ("10m", 28_000_000, 29_700_000),
    ("6m", 50_000_000, 54_000_000),
    ("4m", 70_000_000, 70_500_000),
    ("2m", 144_000_000, 148_000_000),
    ("1.25m", 222_000_000, 225_000_000),
    ("70cm", 420_000_000, 450_000_000),
]

BAND_ORDER = [name for name, _, _ in BAND_EDGES]

# Comment keywords -> canonical mode, checked in order
MODE_KEYWORDS = [
    ("FT8", ("FT8",)),
    ("FT4", ("FT4",)),
    ("JS8", ("JS8", "JS8CALL")),
    ("WSPR", ("WSPR",)),
    ("CW", ("CW", "QCW")),
    ("SSB", ("SSB", "USB", "LSB")),
    ("RTTY", ("RTTY",)),
    ("PSK", ("PSK", "PSK31", "PSK63", "BPSK")),
    ("FM", ("FM",)),
    ("AM", ("AM",)),
]

_TOKEN_RE = re.compile(r"[A-Z0-9]+")


def band_from_frequency(frequency_hz: Optional[float]) -> str:
    """Map a frequency in Hz to its amateur band label (e.g. "20m").

    Returns "Unknown" outside the amateur allocations.
    """
    if frequency_hz is None:
        return UNKNOWN_BAND
    for name, low, high in BAND_EDGES:
        if low <= frequency_hz <= high:
            return name
    return UNKNOWN_BAND


def detect_mode(text: Optional[str]) -> Optional[str]:
    """Detect the operating mode from a spot comment.

    Keywords must appear as whole tokens, so "CQ DX" is not FM and
    "SAM" is not AM.

    Returns:
        Canonical mode name, or None if no keyword is present
    """
    if not text:
        return None
    tokens = set(_TOKEN_RE.findall(text.upper()))
    for mode, keywords in MODE_KEYWORDS:
        if any(keyword in tokens for keyword in keywords):
            return mode
    return None

import pytest

from dxpaths.spots.bands import UNKNOWN_BAND, band_from_frequency, detect_mode


@pytest.mark.parametrize(
    "freq,band",
    [
        (1_840_000, "160m"),
        (3_573_000, "80m"),
        (7_074_000, "40m"),
        (10_136_000, "30m"),
        (14_097_000, "20m"),
        (14_000_000, "20m"),
        (14_350_000, "20m"),
        (21_074_000, "15m"),
        (28_074_000, "10m"),
        (50_313_000, "6m"),
        (144_174_000, "2m"),
    ],
)
def test_band_from_frequency(freq, band):
    assert band_from_frequency(freq) == band


@pytest.mark.parametrize("freq", [None, 1000, 14_500_000, 1_000_000_000])
def test_out_of_band_is_unknown(freq):
    assert band_from_frequency(freq) == UNKNOWN_BAND


@pytest.mark.parametrize(
    "comment,mode",
    [
        ("FT8 -12 dB 1234 Hz", "FT8"),
        ("ft4 sent", "FT4"),
        ("up 2 usb", "SSB"),
        ("JS8CALL heartbeat", "JS8"),
        ("CW 22 WPM CQ", "CW"),
        ("rtty contest", "RTTY"),
    ],
)
def test_detect_mode(comment, mode):
    assert detect_mode(comment) == mode


@pytest.mark.parametrize("comment", [None, "", "cq dx", "SAM", "tnx qso 73"])
def test_detect_mode_needs_whole_keyword(comment):
    assert detect_mode(comment) is None

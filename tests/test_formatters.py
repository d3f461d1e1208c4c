from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW, make_raw
from dxpaths.spots.formatters import SpotFormatters
from dxpaths.spots.models import Report


@pytest.mark.parametrize(
    "minutes,text",
    [(0, "now"), (1, "1m ago"), (59, "59m ago"), (60, "1h ago"), (150, "2h ago")],
)
def test_format_age(minutes, text):
    assert SpotFormatters.format_age(minutes) == text


def test_format_time():
    dt = datetime(2024, 6, 10, 14, 7, 55, tzinfo=timezone.utc)
    assert SpotFormatters.format_time(dt) == "14:07z"


def test_format_numbers():
    assert SpotFormatters.format_frequency(14_097_000) == "14097.0"
    assert SpotFormatters.format_frequency(7_074_160) == "7074.2"
    assert SpotFormatters.format_frequency(None) == "---"
    assert SpotFormatters.format_snr(-12) == "-12 dB"
    assert SpotFormatters.format_snr(4.6) == "5 dB"
    assert SpotFormatters.format_snr(None) == "N/A"
    assert SpotFormatters.format_distance(5264.7) == "5,265 km"
    assert SpotFormatters.format_distance(None) == "---"


def test_format_report():
    report = Report.from_raw(make_raw(snr=-12, mode="FT8", minutes_ago=3))
    columns = SpotFormatters.format_report(report, now=NOW)
    assert columns == {
        "time": "11:57z",
        "age": "3m ago",
        "origin": "K1ABC",
        "destination": "G0XYZ",
        "frequency": "14097.0",
        "band": "20m",
        "mode": "FT8",
        "snr": "-12 dB",
        "signal": "Weak",
        "distance": "---",
    }


def test_format_report_with_path():
    report = Report.from_raw(make_raw(origin_locator="FN42", destination_locator="IO91"))
    columns = SpotFormatters.format_report(report, now=NOW + timedelta(hours=2))
    assert columns["distance"].endswith(" km")
    assert columns["age"] == "2h ago"
    assert columns["mode"] == "---"
    assert columns["signal"] == "Unknown"

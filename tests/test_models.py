from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW, make_raw
from dxpaths.errors import MalformedReport
from dxpaths.geo.locator import GeoPoint, decode_locator
from dxpaths.spots.models import Report, as_utc, parse_timestamp, report_key
from dxpaths.spots.signal import SignalBand

EPOCH = datetime(2024, 6, 10, 6, 13, 20, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        1718000000,
        1718000000.0,
        1718000000000,
        "1718000000",
        "1718000000000",
        "2024-06-10T06:13:20Z",
        "2024-06-10T08:13:20+02:00",
        datetime(2024, 6, 10, 6, 13, 20),
        EPOCH,
    ],
)
def test_parse_timestamp(value):
    parsed = parse_timestamp(value)
    assert parsed == EPOCH
    assert parsed.tzinfo is not None


@pytest.mark.parametrize("value", ["", "yesterday", None, True, float("nan"), [1]])
def test_parse_timestamp_rejects(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_from_raw_normalises_fields():
    report = Report.from_raw(make_raw(
        origin="k1abc", destination=" g0xyz ", snr="-12", comment="FT8 sent",
        origin_locator="fn31pr", destination_locator="IO91",
    ))
    assert report.origin_call == "K1ABC"
    assert report.destination_call == "G0XYZ"
    assert report.frequency_hz == 14_097_000.0
    assert report.band == "20m"
    assert report.mode == "FT8"
    assert report.snr == -12.0
    assert report.signal is SignalBand.WEAK
    assert report.origin_locator == "FN31PR"
    assert report.origin_point == decode_locator("FN31pr")
    assert report.destination_point == decode_locator("IO91")
    assert report.has_path


def test_explicit_mode_wins_over_comment():
    report = Report.from_raw(make_raw(mode="cw", comment="FT8"))
    assert report.mode == "CW"


def test_coordinates_fill_in_locator():
    report = Report.from_raw(make_raw(origin_lat=41.73, origin_lon=-72.71))
    assert report.origin_point == GeoPoint(41.73, -72.71)
    assert report.origin_locator == "FN31PR"
    assert report.destination_point is None
    assert not report.has_path
    assert report.path() is None
    assert report.distance_km is None
    assert report.bearing is None


def test_invalid_locator_leaves_point_empty():
    report = Report.from_raw(make_raw(origin_locator="ZZ99"))
    assert report.origin_locator == "ZZ99"
    assert report.origin_point is None


def test_missing_timestamp_defaults_to_now():
    record = make_raw()
    del record["observed_at"]
    assert Report.from_raw(record, now=NOW).observed_at == NOW


def test_as_utc_normalises_datetimes():
    assert as_utc(NOW.replace(tzinfo=None)) == NOW
    assert as_utc(NOW.replace(tzinfo=None)).tzinfo is timezone.utc
    eastern = NOW.astimezone(timezone(timedelta(hours=-4)))
    assert as_utc(eastern) == NOW
    assert as_utc(eastern).tzinfo is timezone.utc
    assert as_utc(None).tzinfo is timezone.utc


def test_naive_now_is_accepted():
    record = make_raw()
    del record["observed_at"]
    report = Report.from_raw(record, now=NOW.replace(tzinfo=None))
    assert report.observed_at == NOW
    assert report.age_minutes(NOW.replace(tzinfo=None) + timedelta(minutes=3)) == 3


@pytest.mark.parametrize(
    "record",
    [
        "junk",
        None,
        make_raw(origin=""),
        make_raw(destination=None),
        make_raw(frequency_hz=None),
        make_raw(frequency_hz="abc"),
        make_raw(frequency_hz=0),
        make_raw(frequency_hz=-14_097_000),
        make_raw(observed_at="not a time"),
    ],
)
def test_from_raw_rejects_malformed(record):
    with pytest.raises(MalformedReport):
        Report.from_raw(record, now=NOW)


def test_malformed_report_is_value_error():
    assert issubclass(MalformedReport, ValueError)


def test_report_key():
    report = Report.from_raw(make_raw())
    assert report_key(report) == ("G0XYZ", 14_097_000.0, "K1ABC")
    assert report.key == report_key(report)
    # Snr, mode and time are not part of identity
    other = Report.from_raw(make_raw(snr=3, mode="CW", minutes_ago=5))
    assert report_key(other) == report_key(report)


def test_age_minutes(now):
    report = Report.from_raw(make_raw(minutes_ago=0))
    assert report.age_minutes(now) == 0
    assert report.age_minutes(now + timedelta(seconds=59)) == 0
    assert report.age_minutes(now + timedelta(minutes=7, seconds=30)) == 7
    assert report.age_minutes(now - timedelta(minutes=5)) == 0


def test_path_and_geometry():
    report = Report.from_raw(make_raw(origin_locator="FN42", destination_locator="IO91"))
    path = report.path(10)
    assert len(path) == 11
    assert path[0] == report.origin_point
    assert path[-1] == report.destination_point
    assert 5000 < report.distance_km < 5500
    assert 0 < report.bearing < 90


def test_replace_keeps_derived_fields():
    report = Report.from_raw(make_raw(origin_locator="FN42"))
    copy = replace(report, ingested_at=NOW)
    assert copy.band == "20m"
    assert copy.origin_point == report.origin_point
    assert copy.ingested_at == NOW


def test_from_raw_accepts_camel_case_keys():
    report = Report.from_raw({
        "originCall": "K1ABC",
        "destinationCall": "G0XYZ",
        "frequencyHz": 14_097_000,
        "observedAt": "2024-06-10T06:13:20Z",
        "destinationLocator": "IO91",
        "originLat": 42.0,
        "originLon": -71.0,
    })
    assert report.key == ("G0XYZ", 14_097_000.0, "K1ABC")
    assert report.observed_at == EPOCH
    assert report.has_path

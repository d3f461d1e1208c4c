import pytest

from dxpaths.errors import LocatorError
from dxpaths.geo.locator import (
    GeoPoint,
    decode_locator,
    encode_locator,
    is_valid_locator,
    parse_locator,
)


def _square_centre(locator):
    field_lon = ord(locator[0].upper()) - ord("A")
    field_lat = ord(locator[1].upper()) - ord("A")
    lon = field_lon * 20 - 180 + int(locator[2]) * 2 + 1
    lat = field_lat * 10 - 90 + int(locator[3]) + 0.5
    return lat, lon


@pytest.mark.parametrize("locator", ["DN70", "FN31", "IO91", "AA00", "RR99", "JJ55", "QF56"])
def test_four_character_locator_is_square_centre(locator):
    point = decode_locator(locator)
    lat, lon = _square_centre(locator)
    assert point.latitude == pytest.approx(lat)
    assert point.longitude == pytest.approx(lon)


def test_dn70_centre():
    point = decode_locator("DN70")
    assert point == GeoPoint(latitude=40.5, longitude=-105.0)


def test_six_character_locator_uses_subsquare_centre():
    point = decode_locator("FN31pr")
    # F=5 N=13, square 3/1, subsquare p=15 r=17
    assert point.longitude == pytest.approx(-180 + 5 * 20 + 3 * 2 + 15 * (2 / 24) + 1 / 24)
    assert point.latitude == pytest.approx(-90 + 13 * 10 + 1 + 17 * (1 / 24) + 0.5 / 24)


def test_subsquare_stays_inside_square():
    lat, lon = _square_centre("IO91")
    for sub in ("aa", "xx", "lm"):
        point = decode_locator("IO91" + sub)
        assert lon - 1 < point.longitude < lon + 1
        assert lat - 0.5 < point.latitude < lat + 0.5


def test_decode_is_case_insensitive():
    assert decode_locator("fn31PR") == decode_locator("FN31pr")


def test_extra_characters_ignored():
    assert decode_locator("FN31pr12") == decode_locator("FN31pr")


@pytest.mark.parametrize("bad", [None, "", "FN3", "  ", "ZZ00", "FNAB", "FN31zz", "1N31", "FN3\u00b2", "IO9\u00b9", "FN\u0663\u0661"])
def test_invalid_locators_decode_to_none(bad):
    assert decode_locator(bad) is None
    assert is_valid_locator(bad) is False


def test_parse_locator_raises_locator_error():
    with pytest.raises(LocatorError):
        parse_locator("FN3")
    with pytest.raises(ValueError):
        parse_locator("SS00")
    with pytest.raises(LocatorError):
        parse_locator("FN3\u00b2")


def test_encode_locator_round_trip():
    point = decode_locator("FN31pr")
    assert encode_locator(point.latitude, point.longitude) == "FN31pr"


def test_encode_locator_edges():
    assert encode_locator(-90, -180) == "AA00aa"
    assert encode_locator(90, 180).startswith("RR99")


def test_geopoint_range_checked():
    with pytest.raises(ValueError):
        GeoPoint(latitude=91, longitude=0)
    with pytest.raises(ValueError):
        GeoPoint(latitude=0, longitude=-180.5)
    assert GeoPoint(40.5, -105.0).as_tuple() == (40.5, -105.0)

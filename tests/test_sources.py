import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from dxpaths.errors import FetchFailure
from dxpaths.sources import DXClusterSource, PSKReporterSource, WSPRSource
from dxpaths.sources.dxcluster import khz_to_hz
from dxpaths.spots.aggregator import SpotAggregator
from dxpaths.spots.models import Report, utc_now


def epoch_ms():
    return int(utc_now().timestamp() * 1000)


def run_against(app, make_source):
    """Start ``app`` on a local port and fetch one batch from it."""
    async def scenario():
        server = TestServer(app)
        await server.start_server()
        try:
            source = make_source(f"http://{server.host}:{server.port}")
            try:
                return source, await source.fetch_batch()
            except FetchFailure as e:
                return source, e
        finally:
            await server.close()

    return asyncio.run(scenario())


def json_app(path, payload, status=200, seen=None):
    async def handler(request):
        if seen is not None:
            seen.append(request)
        return web.json_response(payload, status=status)

    app = web.Application()
    app.router.add_get(path, handler)
    return app


def cluster_spot(**overrides):
    spot = {
        "dxCall": "G0XYZ", "freq": "14097.0", "spotter": "K1ABC",
        "comment": "FT8 -05dB", "timestamp": epoch_ms(),
        "spotterLat": 41.5, "spotterLon": -71.0, "spotterGrid": "FN41",
        "dxLat": 51.5, "dxLon": -0.1, "dxGrid": "IO91",
    }
    spot.update(overrides)
    return spot


def test_khz_to_hz():
    assert khz_to_hz("14097.0") == 14_097_000
    assert khz_to_hz(7074) == 7_074_000
    assert khz_to_hz("") is None
    assert khz_to_hz("abc") is None


def test_dx_cluster_batch():
    payload = [cluster_spot(), cluster_spot(dxCall="DL1AAA", freq="abc"), "noise"]
    source, records = run_against(
        json_app("/api/dxcluster/paths", payload), DXClusterSource
    )
    assert len(records) == 2
    assert source.last_error is None
    assert source.last_fetch_time is not None

    record = records[0]
    assert record["origin_call"] == "K1ABC"
    assert record["destination_call"] == "G0XYZ"
    assert record["frequency_hz"] == 14_097_000
    assert record["source"] == "dxcluster"

    aggregator = SpotAggregator()
    stats = aggregator.ingest(records)
    assert stats["inserted"] == 1
    assert stats["skipped"] == 1
    spot = aggregator.query().paths[0]
    assert spot.mode == "FT8"
    assert spot.band == "20m"
    assert spot.origin_locator == "FN41"


def test_dx_cluster_wrapped_payload():
    _, records = run_against(
        json_app("/api/dxcluster/paths", {"paths": [cluster_spot()]}), DXClusterSource
    )
    assert [r["destination_call"] for r in records] == ["G0XYZ"]


def test_http_error_raises_fetch_failure():
    source, error = run_against(
        json_app("/api/dxcluster/paths", {"error": "down"}, status=503), DXClusterSource
    )
    assert isinstance(error, FetchFailure)
    assert source.last_error == "HTTP 503"
    assert "dxcluster" in str(error)


def test_invalid_json_raises_fetch_failure():
    async def handler(request):
        return web.Response(text="<html>oops</html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/api/dxcluster/paths", handler)
    source, error = run_against(app, DXClusterSource)
    assert isinstance(error, FetchFailure)
    assert source.last_error == "Invalid JSON"


def test_unexpected_shape_raises_fetch_failure():
    source, error = run_against(
        json_app("/api/dxcluster/paths", {"unexpected": 1}), DXClusterSource
    )
    assert isinstance(error, FetchFailure)
    assert source.last_error == "Unexpected response"


def test_connection_refused_raises_fetch_failure():
    source = DXClusterSource("http://127.0.0.1:1", timeout=5)
    with pytest.raises(FetchFailure):
        asyncio.run(source.fetch_batch())
    assert source.last_error


def psk_payload(rate_limited=False, error=None):
    return {
        "tx": {
            "reports": [{
                "sender": "K1ABC", "senderGrid": "FN31", "receiver": "G0XYZ",
                "receiverGrid": "IO91", "freq": 14_074_500, "snr": -9, "mode": "FT8",
                "timestamp": epoch_ms(), "lat": 51.5, "lon": -0.5,
            }],
            "rateLimited": rate_limited,
            "error": error,
        },
        "rx": {
            "reports": [{
                "sender": "JA1ZZZ", "senderGrid": "PM95", "receiver": "K1ABC",
                "receiverGrid": "FN31", "freq": 14_075_100, "snr": -20, "mode": "FT8",
                "timestamp": epoch_ms(), "lat": 35.6, "lon": 139.7,
            }],
            "rateLimited": False,
            "error": None,
        },
        "error": None,
    }


def test_pskreporter_both_directions():
    seen = []
    app = json_app("/api/pskreporter/{call}", psk_payload(), seen=seen)
    source, records = run_against(
        app, lambda url: PSKReporterSource(url, callsign="k1abc", minutes=10)
    )
    assert seen[0].match_info["call"] == "K1ABC"
    assert seen[0].query["minutes"] == "10"

    assert len(records) == 2
    heard_me, i_heard = records
    assert (heard_me["origin_call"], heard_me["destination_call"]) == ("G0XYZ", "K1ABC")
    assert heard_me["origin_lat"] == 51.5
    assert "destination_lat" not in heard_me
    assert (i_heard["origin_call"], i_heard["destination_call"]) == ("K1ABC", "JA1ZZZ")
    assert i_heard["destination_lon"] == 139.7

    report = Report.from_raw(heard_me)
    assert report.has_path
    assert report.mode == "FT8"
    assert source.rate_limited is False


def test_pskreporter_single_direction():
    _, records = run_against(
        json_app("/api/pskreporter/{call}", psk_payload()),
        lambda url: PSKReporterSource(url, callsign="K1ABC", direction="rx"),
    )
    assert [r["destination_call"] for r in records] == ["JA1ZZZ"]


def test_pskreporter_rate_limited_keeps_cached_reports():
    source, records = run_against(
        json_app("/api/pskreporter/{call}", psk_payload(True, "Rate limited, using cache")),
        lambda url: PSKReporterSource(url, callsign="K1ABC"),
    )
    assert len(records) == 2
    assert source.rate_limited is True
    assert source.last_error == "Rate limited, using cache"


def test_pskreporter_without_callsign_skips_request():
    source = PSKReporterSource("http://127.0.0.1:1")
    assert asyncio.run(source.fetch_batch()) == []
    assert source.last_error is None


def test_pskreporter_configure():
    source = PSKReporterSource(callsign="K1ABC")
    assert source.configure(minutes=30, direction="TX") is True
    assert source.configure(minutes=30) is False
    assert source.get_source_info()["direction"] == "tx"
    with pytest.raises(ValueError):
        source.configure(minutes=120)
    with pytest.raises(ValueError):
        source.configure(direction="sideways")
    with pytest.raises(ValueError):
        source.configure(band="20m")


def test_wspr_batch():
    seen = []
    payload = {"spots": [{
        "sender": "K1ABC", "senderGrid": "FN31", "senderLat": 41.7, "senderLon": -72.7,
        "receiver": "G0XYZ", "receiverGrid": "IO91", "receiverLat": 51.5, "receiverLon": -0.5,
        "freqMHz": 14.0971, "snr": -24, "timestamp": epoch_ms(),
    }]}
    source, records = run_against(
        json_app("/api/wspr/heatmap", payload, seen=seen),
        lambda url: WSPRSource(url, minutes=60, band="20M"),
    )
    assert seen[0].query["minutes"] == "60"
    assert seen[0].query["band"] == "20m"

    (record,) = records
    assert record["frequency_hz"] == pytest.approx(14_097_100)
    report = Report.from_raw(record)
    assert report.mode == "WSPR"
    assert report.band == "20m"
    assert report.origin_call == "G0XYZ"
    assert report.destination_point.latitude == 41.7


def test_wspr_configure():
    source = WSPRSource()
    assert source.configure(band="") is False
    assert source.band == "all"
    with pytest.raises(ValueError):
        source.configure(minutes=1)

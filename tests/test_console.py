import asyncio
import json

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import make_raw
from dxpaths import console
from dxpaths.config import SpotConfig
from dxpaths.sources import DXClusterSource, PSKReporterSource, WSPRSource
from dxpaths.spots.aggregator import SpotAggregator
from dxpaths.spots.filters import FilterConfig
from dxpaths.spots.models import utc_now


@pytest.fixture()
def config(tmp_path):
    return SpotConfig(str(tmp_path / "config.json"))


def test_build_source(config):
    config.set("MYCALL", "K1ABC")
    config.set("WSPR_BAND", "20m")
    assert isinstance(console.build_source("dxcluster", config), DXClusterSource)
    psk = console.build_source("pskreporter", config)
    assert isinstance(psk, PSKReporterSource)
    assert psk.callsign == "K1ABC"
    assert console.build_source("pskreporter", config, callsign="g0xyz").callsign == "G0XYZ"
    wspr = console.build_source("wspr", config)
    assert isinstance(wspr, WSPRSource)
    assert wspr.band == "20m"
    with pytest.raises(ValueError):
        console.build_source("rbn", config)


def test_build_schedulers_share_aggregator(config):
    config.set("DX_INTERVAL", "45")
    aggregator = console.build_aggregator(config)
    schedulers = console.build_schedulers(config, aggregator, ["dxcluster", "wspr"])
    assert [s.source.name for s in schedulers] == ["dxcluster", "wspr"]
    assert schedulers[0].interval == 45
    assert schedulers[1].interval == 300
    assert all(s.aggregator is aggregator for s in schedulers)


def test_display_spots(console_output):
    aggregator = SpotAggregator()
    now = utc_now()
    aggregator.ingest([
        make_raw(now=now, snr=-3, mode="FT8", origin_locator="FN31", destination_locator="IO91"),
        make_raw(now=now, destination="DL1AAA", frequency_hz=7_074_000, minutes_ago=2),
    ], now=now)

    console.display_spots(aggregator, FilterConfig())
    text = "\n".join(console_output)
    assert "2 shown, 1 with paths, 2 retained" in text
    assert "G0XYZ" in text and "DL1AAA" in text
    assert "Best signal: G0XYZ de K1ABC -3 dB on 20m" in text

    console_output.clear()
    console.display_spots(aggregator, FilterConfig(bands=["10m"]))
    assert any("No spots match" in line for line in console_output)


def test_main_once_prints_spots(tmp_path, console_output):
    spots = [{
        "dxCall": "G0XYZ", "freq": "14097.0", "spotter": "K1ABC", "comment": "FT8",
        "timestamp": int(utc_now().timestamp() * 1000), "spotterGrid": "FN31", "dxGrid": "IO91",
    }]

    async def handler(request):
        return web.json_response(spots)

    async def scenario():
        app = web.Application()
        app.router.add_get("/api/dxcluster/paths", handler)
        server = TestServer(app)
        await server.start_server()
        try:
            config_file = tmp_path / "config.json"
            config_file.write_text(json.dumps({
                "SERVER_URL": f"http://{server.host}:{server.port}",
                "SOURCES": "dxcluster",
            }))
            await console.main(config_file=str(config_file), once=True)
        finally:
            await server.close()

    asyncio.run(scenario())
    text = "\n".join(console_output)
    assert "1 shown, 1 with paths" in text
    assert "G0XYZ" in text
    assert "dxcluster: every 30s" in text

"""Console front end: poll the configured sources and print the spot table."""

import asyncio
import signal
from typing import Dict, List, Optional, Sequence

from prompt_toolkit import HTML

from . import constants
from .config import SpotConfig
from .scheduler import RefreshScheduler
from .sources import DXClusterSource, PSKReporterSource, SpotSource, WSPRSource
from .spots.aggregator import SpotAggregator
from .spots.callsign_info import PrefixResolver
from .spots.filters import FilterConfig
from .spots.formatters import SpotFormatters
from .spots.models import utc_now
from .spots.stats import summarize
from .utils import (
    print_debug,
    print_error,
    print_header,
    print_info,
    print_pt,
    print_status,
    print_table_row,
    print_warning,
)

SPOT_COLUMNS = [
    ("time", 6), ("age", 7), ("origin", 10), ("destination", 10),
    ("frequency", 9), ("band", 5), ("mode", 5), ("snr", 7),
    ("signal", 9), ("distance", 9),
]

# Rows printed per refresh
DISPLAY_ROWS = 25


def build_source(name: str, config: SpotConfig, callsign: Optional[str] = None) -> SpotSource:
    """Create a source from the settings store."""
    base_url = config.get("SERVER_URL")
    timeout = config.get_int("HTTP_TIMEOUT")

    if name == DXClusterSource.name:
        return DXClusterSource(base_url, timeout=timeout)
    if name == PSKReporterSource.name:
        return PSKReporterSource(
            base_url,
            callsign=callsign or config.get("MYCALL"),
            minutes=config.get_int("PSK_MINUTES"),
            direction=config.get("PSK_DIRECTION"),
            timeout=timeout,
        )
    if name == WSPRSource.name:
        return WSPRSource(
            base_url,
            minutes=config.get_int("WSPR_MINUTES"),
            band=config.get("WSPR_BAND"),
            timeout=timeout,
        )
    raise ValueError(f"Unknown source '{name}'")


SOURCE_INTERVAL_KEYS = {
    DXClusterSource.name: "DX_INTERVAL",
    PSKReporterSource.name: "PSK_INTERVAL",
    WSPRSource.name: "WSPR_INTERVAL",
}


def build_schedulers(
    config: SpotConfig,
    aggregator: SpotAggregator,
    source_names: Sequence[str],
    callsign: Optional[str] = None,
) -> List[RefreshScheduler]:
    """One scheduler per configured source, all feeding ``aggregator``."""
    schedulers = []
    for name in source_names:
        source = build_source(name, config, callsign)
        interval = config.get_int(SOURCE_INTERVAL_KEYS[name])
        schedulers.append(RefreshScheduler(source, aggregator, interval=interval))
    return schedulers


def build_aggregator(config: SpotConfig) -> SpotAggregator:
    cty_file = config.get("CTY_FILE")
    resolver = PrefixResolver.from_file(cty_file) if cty_file else PrefixResolver()
    return SpotAggregator(
        retention=config.retention(),
        max_capacity=config.get_int("MAX_SPOTS"),
        resolver=resolver,
    )


def display_spots(aggregator: SpotAggregator, filters: FilterConfig, rows: int = DISPLAY_ROWS,
                  path_limit: Optional[int] = None):
    """Print the filtered spot table followed by an activity summary."""
    now = utc_now()
    view = aggregator.query(filters, path_limit=path_limit)

    print_header(
        f"Spots: {len(view.spots)} shown, {len(view.paths)} with paths, "
        f"{aggregator.total_spots} retained"
    )
    if not view.spots:
        print_pt(HTML("<gray>No spots match the current filters</gray>"))
        return

    widths = [w for _, w in SPOT_COLUMNS]
    print_table_row([name.upper() for name, _ in SPOT_COLUMNS], widths, header=True)
    for report in view.spots[:rows]:
        columns = SpotFormatters.format_report(report, now)
        print_table_row([columns[name] for name, _ in SPOT_COLUMNS], widths)
    if len(view.spots) > rows:
        print_pt(HTML(f"<gray>  ... {len(view.spots) - rows} more</gray>"))

    summary = summarize(view.spots)
    print_pt("")
    print_status(
        f"Bands: {', '.join(summary.bands) or '---'}  "
        f"Modes: {', '.join(summary.modes) or '---'}  "
        f"Stations: {summary.origin_stations} heard-by / "
        f"{summary.destination_stations} heard"
    )
    if summary.best is not None:
        best = summary.best
        print_status(
            f"Best signal: {best.destination_call} de {best.origin_call} "
            f"{SpotFormatters.format_snr(best.snr)} on {best.band}"
        )


def display_status(schedulers: Sequence[RefreshScheduler]):
    """Print one status line per scheduler."""
    for scheduler in schedulers:
        status = scheduler.get_status()
        last = status["last_update"].strftime("%H:%M:%S") if status["last_update"] else "never"
        line = (
            f"{status['source']}: every {status['interval']}s, last update {last}, "
            f"{status['fetch_count']} fetches, {status['failure_count']} failures"
        )
        if status["rate_limited"]:
            print_warning(f"{line} (rate limited, showing cached data)")
        elif status["error"]:
            print_warning(f"{line} (error: {status['last_error']})")
        else:
            print_status(line)


async def main(config_file=None, source_names=None, callsign=None, once=False):
    print_header(f"DX Paths Console v{constants.VERSION}")

    config = SpotConfig(config_file)
    names = list(source_names or config.sources())
    if not names:
        print_error("No sources configured (set SOURCES or use -s)")
        return

    try:
        aggregator = build_aggregator(config)
        schedulers = build_schedulers(config, aggregator, names, callsign)
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        return

    filters = config.filter_config()
    # WSPR floods the path view
    path_limit = constants.WSPR_MAX_PATHS if WSPRSource.name in names else None
    if not filters.is_empty():
        print_info(f"Filters active: {filters}")
    print_info(f"Sources: {', '.join(names)} via {config.get('SERVER_URL')}")

    if once:
        results: List[Optional[Dict[str, int]]] = await asyncio.gather(
            *(s.refresh_now() for s in schedulers)
        )
        print_debug(f"Refresh results: {results}", level=3)
        display_status(schedulers)
        display_spots(aggregator, filters, path_limit=path_limit)
        for scheduler in schedulers:
            await scheduler.close()
        return

    for scheduler in schedulers:
        await scheduler.start()

    try:
        while True:
            await asyncio.sleep(constants.DISPLAY_INTERVAL)
            display_status(schedulers)
            display_spots(aggregator, filters, path_limit=path_limit)
    finally:
        print_info("Stopping refresh...")
        for scheduler in schedulers:
            await scheduler.close()


def run(config_file=None, source_names=None, callsign=None, once=False):
    """Entry point for the console application."""
    def sigterm_handler(signum, frame):
        """Handle SIGTERM by raising SIGINT to stop the display loop."""
        signal.raise_signal(signal.SIGINT)

    signal.signal(signal.SIGTERM, sigterm_handler)

    try:
        asyncio.run(
            main(
                config_file=config_file,
                source_names=source_names,
                callsign=callsign,
                once=once,
            )
        )
    except KeyboardInterrupt:
        print_pt(HTML("\n<yellow>Interrupted by user</yellow>"))

    print_pt(HTML("<gray>73!</gray>"))

#!/usr/bin/env python3
"""
DX Paths Console - Entry Point

Live propagation spots from DX cluster, PSKReporter and WSPR with
great circle path details.
"""

import os
import sys
from datetime import datetime

# Rotate the console log above this size
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB


def open_console_log(path):
    """Open the console log for appending, rotating it first if too large."""
    log_path = os.path.expanduser(path)
    if os.path.exists(log_path) and os.path.getsize(log_path) > MAX_LOG_SIZE:
        timestamp = datetime.now().strftime('%Y%m%d-%H%M%S')
        backup_path = f"{log_path}.{timestamp}"
        os.rename(log_path, backup_path)
        print(f"Rotated log: {backup_path}", file=sys.stderr)
    return log_path, open(log_path, 'a', buffering=1)


if __name__ == "__main__":
    import argparse
    from dxpaths import constants
    from dxpaths.console import run
    from dxpaths.sources import SOURCES
    from dxpaths.utils import close_debug_log, open_debug_log, print_info, set_console_log_file

    parser = argparse.ArgumentParser(description="DX Paths Console")
    parser.add_argument(
        "-d",
        "--debug",
        nargs="?",
        type=int,
        const=2,
        default=0,
        metavar="LEVEL",
        help="Enable debug output at startup (optional level 0-6, default: 2)",
    )
    parser.add_argument(
        "-l",
        "--log",
        nargs="?",
        const="~/.dxpaths-console.log",
        metavar="FILE",
        help="Log all console output to file (default: ~/.dxpaths-console.log)",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Settings file (default: ~/.dxpaths_config.json)",
    )
    parser.add_argument(
        "-s",
        "--source",
        action="append",
        choices=sorted(SOURCES),
        metavar="NAME",
        help=f"Spot source, repeatable ({', '.join(sorted(SOURCES))}); overrides SOURCES",
    )
    parser.add_argument(
        "--callsign",
        metavar="CALL",
        help="Callsign for PSKReporter queries (default: MYCALL)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Refresh every source once, print the spots and exit",
    )

    args = parser.parse_args()

    if not 0 <= args.debug <= 6:
        parser.error(f"Debug level must be 0-6, got {args.debug}")

    # Install logging to file if requested
    log_file = None
    if args.log:
        log_path, log_file = open_console_log(args.log)
        set_console_log_file(log_file)
        print(f"Logging enabled to: {log_path}", file=sys.stderr)

    constants.DEBUG_LEVEL = args.debug
    if args.debug:
        print_info(f"Debug level {args.debug} enabled at startup")
    if args.debug >= 5:
        debug_path = open_debug_log()
        if debug_path:
            print_info(f"Debug log: {debug_path}")

    try:
        run(
            config_file=args.config,
            source_names=args.source,
            callsign=args.callsign,
            once=args.once,
        )
    finally:
        close_debug_log()
        # Close log file if it was opened
        if log_file:
            set_console_log_file(None)
            log_file.close()

"""Console output helpers for the DX paths console."""

import html
from datetime import datetime
from pathlib import Path

from prompt_toolkit import print_formatted_text as _print_pt_original
from prompt_toolkit.formatted_text import HTML, to_plain_text

from . import constants


# Debug log file handle (for DEBUG_LEVEL >= 5)
_debug_log_file = None
_debug_log_path = None

# Console log file handle (for -l option)
_console_log_file = None


def set_console_log_file(file_handle):
    """Set the console log file handle for print_pt output."""
    global _console_log_file
    _console_log_file = file_handle


def print_pt(*args, **kwargs):
    """Wrapper for print_formatted_text that also logs to file if enabled."""
    _print_pt_original(*args, **kwargs)

    if _console_log_file and args:
        try:
            text = to_plain_text(args[0])
            stamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
            _console_log_file.write(f"[{stamp}] {text}\n")
            _console_log_file.flush()
        except (OSError, ValueError):
            # Log file closed or unwritable
            pass


def open_debug_log():
    """Open a debug log file for high-level debugging (DEBUG_LEVEL >= 5).

    Creates a new log file in ~/.cache/dxpaths-debug-logs/ named
    ``debug-YYYYMMDDTHHMMSS.log``.

    Returns:
        Path to the opened log file, or None if it could not be created
    """
    global _debug_log_file, _debug_log_path

    close_debug_log()

    try:
        log_dir = Path.home() / ".cache" / "dxpaths-debug-logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        log_path = log_dir / f"debug-{datetime.now().strftime('%Y%m%dT%H%M%S')}.log"
        _debug_log_file = open(log_path, 'a', buffering=1)  # Line buffered
        _debug_log_path = str(log_path)

        _debug_log_file.write(f"=== Debug Log Started: {datetime.now().isoformat()} ===\n")
        _debug_log_file.write(f"=== Debug Level: {constants.DEBUG_LEVEL} ===\n\n")

        return _debug_log_path

    except OSError as e:
        print_error(f"Failed to open debug log: {e}")
        _debug_log_file = None
        _debug_log_path = None
        return None


def close_debug_log():
    """Close the debug log file if open."""
    global _debug_log_file, _debug_log_path

    if _debug_log_file:
        try:
            _debug_log_file.write(f"\n=== Debug Log Closed: {datetime.now().isoformat()} ===\n")
            _debug_log_file.close()
        except OSError:
            pass
        finally:
            _debug_log_file = None
            _debug_log_path = None


def print_header(text):
    """Print a colored header."""
    print_pt(HTML(f"\n<b><cyan>{'='*78}</cyan></b>"))
    print_pt(HTML(f"<b><cyan>{_sanitize_for_html(text)}</cyan></b>"))
    print_pt(HTML(f"<b><cyan>{'='*78}</cyan></b>"))


def _sanitize_for_html(text):
    """Remove control characters and escape HTML entities."""
    filtered = "".join(
        (
            c
            if (c >= " " and c != "\x7f") or c in "\n\r\t"
            else f"\\x{ord(c):02x}"
        )
        for c in str(text)
    )
    return html.escape(filtered, quote=False)


def print_info(text):
    """Print info message."""
    print_pt(HTML(f"<green>[INFO]</green> {_sanitize_for_html(text)}"))


def print_error(text):
    """Print error message."""
    print_pt(HTML(f"<red>[ERROR]</red> {_sanitize_for_html(text)}"))


def print_status(text):
    """Print status message."""
    print_pt(HTML(f"<blue>[STATUS]</blue> {_sanitize_for_html(text)}"))


def print_warning(text):
    """Print warning message."""
    print_pt(HTML(f"<orange>[WARNING]</orange> {_sanitize_for_html(text)}"))


def _station_filter_level(stations):
    """Highest per-station debug level configured for any of ``stations``.

    Matches exact callsigns as well as base calls (portable suffixes such as
    ``/P`` and SSIDs are ignored on both sides).
    """
    best = 0
    if not stations or not constants.DEBUG_STATION_FILTERS:
        return best

    for station in stations:
        if not station:
            continue
        station_upper = station.upper().strip()
        station_base = station_upper.split('/')[0].split('-')[0]

        for filter_call, filter_level in constants.DEBUG_STATION_FILTERS.items():
            filter_upper = filter_call.upper().strip()
            filter_base = filter_upper.split('/')[0].split('-')[0]
            if station_upper == filter_upper or station_base == filter_base:
                best = max(best, filter_level)

    return best


def print_debug(text, level=2, stations=None):
    """Print debug message with optional per-station filtering.

    Args:
        text: The message to print
        level: Debug level (default=2 for general debugging)
        stations: Optional list of callsigns involved in this message
                  (origin, destination). Used for per-station filtering.

    The message is printed if DEBUG_LEVEL >= level, or if any station in
    ``stations`` has a filter level >= level in DEBUG_STATION_FILTERS.
    At level >= 5 the message also goes to the debug log file when open.
    """
    station_level = _station_filter_level(stations)
    if constants.DEBUG_LEVEL < level and station_level < level:
        return

    ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]  # milliseconds
    print_pt(HTML(f"<gray>[DEBUG {ts}]</gray> {_sanitize_for_html(text)}"))

    if _debug_log_file and (constants.DEBUG_LEVEL >= 5 or station_level >= 5):
        try:
            station_tag = f" [{','.join(s for s in stations if s)}]" if stations else ""
            _debug_log_file.write(f"[DEBUG {ts}] [L{level}]{station_tag} {text}\n")
        except OSError:
            pass


def print_table_row(cols, widths, header=False):
    """Print a formatted table row."""
    row = "  "
    for col, width in zip(cols, widths):
        row += str(col).ljust(width) + "  "

    if header:
        print_pt(HTML(f"<b>{_sanitize_for_html(row)}</b>"))
        print_pt("  " + "-" * (sum(widths) + len(widths) * 2))
    else:
        print_pt(row)

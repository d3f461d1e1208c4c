"""Constants and configuration defaults for the DX paths console."""

# --- Version ---
VERSION = "0.4.0"

# --- Refresh intervals (seconds) ---
DX_CLUSTER_INTERVAL = 30  # aggregator raw feed
PSKREPORTER_INTERVAL = 300  # rate-limited, be friendly
WSPR_INTERVAL = 300
HTTP_TIMEOUT = 15  # seconds, total per request

# --- Aggregation ---
DEFAULT_RETENTION_MINUTES = 30
DEFAULT_MAX_SPOTS = 200
WSPR_MAX_PATHS = 500  # rendering cap for the WSPR path layer
GREAT_CIRCLE_STEPS = 50

# --- Network defaults ---
DEFAULT_SERVER_URL = "http://localhost:3000"
NO_CALL = "N0CALL"

# Console redraw interval (seconds)
DISPLAY_INTERVAL = 30

# Debug level system (0-6)
# 0 = No debugging
# 1 = Reserved for future use
# 2 = Critical errors and important events
# 3 = Refresh cycles, scheduler state changes
# 4 = Per-batch ingest statistics
# 5 = Per-record details (skipped reports, evictions)
# 6 = Everything including resolver lookups and config I/O
DEBUG_LEVEL = 0

# Per-station debug filters (callsign -> debug_level)
# When set, overrides DEBUG_LEVEL for specific stations
# Example: {"K1ABC": 5} = debug level 5 for spots involving K1ABC
DEBUG_STATION_FILTERS = {}

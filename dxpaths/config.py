"""TNC-2 style settings store for the DX paths console."""

import json
import os
from datetime import timedelta

from prompt_toolkit import HTML

from . import constants
from .geo.locator import decode_locator
from .sources import SOURCES
from .spots.filters import FilterConfig
from .utils import (
    _sanitize_for_html,
    print_debug,
    print_error,
    print_header,
    print_info,
    print_pt,
)

# Integer settings: key -> (min, max, unit)
INT_RANGES = {
    "DX_INTERVAL": (10, 3600, "seconds"),
    "PSK_INTERVAL": (60, 3600, "seconds"),
    "PSK_MINUTES": (5, 60, "minutes"),
    "WSPR_INTERVAL": (60, 3600, "seconds"),
    "WSPR_MINUTES": (5, 240, "minutes"),
    "RETENTION": (1, 1440, "minutes"),
    "MAX_SPOTS": (1, 10000, "spots"),
    "HTTP_TIMEOUT": (1, 120, "seconds"),
}

# Filter settings: key -> FilterConfig field
FILTER_KEYS = {
    "FILTER_WATCHLIST_ONLY": "watchlist_only",
    "FILTER_WATCHLIST": "watchlist",
    "FILTER_EXCLUDE": "exclude_list",
    "FILTER_CQ_ZONES": "cq_zones",
    "FILTER_ITU_ZONES": "itu_zones",
    "FILTER_CONTINENTS": "continents",
    "FILTER_BANDS": "bands",
    "FILTER_MODES": "modes",
    "FILTER_CALLSIGN": "callsign",
}

CONTINENTS = ("NA", "SA", "EU", "AF", "AS", "OC", "AN")

DEFAULT_SETTINGS = {
    "MYCALL": constants.NO_CALL,
    "MYLOCATION": "",  # Maidenhead grid square of this station
    "SERVER_URL": constants.DEFAULT_SERVER_URL,  # Spot relay server
    "SOURCES": "dxcluster",  # Comma list: dxcluster, pskreporter, wspr
    "DX_INTERVAL": str(constants.DX_CLUSTER_INTERVAL),
    "PSK_INTERVAL": str(constants.PSKREPORTER_INTERVAL),
    "PSK_MINUTES": "15",
    "PSK_DIRECTION": "both",  # tx = who hears me, rx = who I hear
    "WSPR_INTERVAL": str(constants.WSPR_INTERVAL),
    "WSPR_MINUTES": "30",
    "WSPR_BAND": "all",
    "RETENTION": str(constants.DEFAULT_RETENTION_MINUTES),  # minutes
    "MAX_SPOTS": str(constants.DEFAULT_MAX_SPOTS),
    "HTTP_TIMEOUT": str(constants.HTTP_TIMEOUT),
    "CTY_FILE": "",  # Optional JSON prefix table (blank = built-in)
    "FILTER_WATCHLIST_ONLY": "OFF",
    "FILTER_WATCHLIST": "",
    "FILTER_EXCLUDE": "",
    "FILTER_CQ_ZONES": "",
    "FILTER_ITU_ZONES": "",
    "FILTER_CONTINENTS": "",
    "FILTER_BANDS": "",
    "FILTER_MODES": "",
    "FILTER_CALLSIGN": "",
}


class SpotConfig:
    """TNC-2 style configuration management."""

    def __init__(self, config_file=None):
        # Default to user's home directory
        if config_file is None:
            config_file = os.path.expanduser("~/.dxpaths_config.json")

        self.config_file = config_file

        self.settings = dict(DEFAULT_SETTINGS)
        self.load()

    def load(self):
        """Load configuration from file; keeps defaults on any error."""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    saved = json.load(f)
                if not isinstance(saved, dict):
                    raise ValueError("settings file is not a JSON object")
                for key, value in saved.items():
                    if key in self.settings:
                        self.settings[key] = str(value)
                print_debug(f"Loaded config from {self.config_file}", level=6)
        except (OSError, ValueError) as e:
            print_debug(f"Could not load config: {e}", level=6)

    def save(self):
        """Save configuration to file."""
        try:
            with open(self.config_file, "w") as f:
                json.dump(self.settings, f, indent=2)
            print_debug(f"Saved config to {self.config_file}", level=6)
        except OSError as e:
            print_error(f"Could not save config: {e}")

    def set(self, key, value):
        """Set a configuration value.

        Returns:
            True if the value was valid and saved, False otherwise
        """
        key = key.upper()
        value = str(value).strip()
        if key not in self.settings:
            print_error(f"Unknown setting '{key}'")
            return False

        if key == "MYCALL":
            value = value.upper()

        # Validate MYLOCATION (Maidenhead grid square)
        if key == "MYLOCATION" and value:
            point = decode_locator(value)
            if point is None:
                print_error(f"Invalid grid square '{value}'")
                return False
            value = value.upper()
            print_info(f"MYLOCATION set to {value} ({point.latitude:.4f}, {point.longitude:.4f})")

        if key == "SERVER_URL":
            if not value.startswith(("http://", "https://")):
                print_error(f"Invalid server URL '{value}': must start with http:// or https://")
                return False
            value = value.rstrip("/")

        if key == "SOURCES":
            names = [n.strip().lower() for n in value.split(",") if n.strip()]
            unknown = [n for n in names if n not in SOURCES]
            if not names or unknown:
                valid = ', '.join(SOURCES.keys())
                print_error(f"Invalid sources '{value}'. Valid: {valid}")
                return False
            value = ",".join(names)

        if key == "PSK_DIRECTION":
            value = value.lower()
            if value not in ("tx", "rx", "both"):
                print_error(f"Invalid direction '{value}'. Valid: tx, rx, both")
                return False

        if key == "WSPR_BAND":
            value = value.lower() or "all"

        if key in INT_RANGES:
            low, high, unit = INT_RANGES[key]
            try:
                number = int(value)
            except ValueError:
                print_error(f"Invalid {key} '{value}': must be a number")
                return False
            if not (low <= number <= high):
                print_error(f"Invalid {key} '{value}': must be {low}-{high} {unit}")
                return False
            value = str(number)

        if key == "CTY_FILE" and value and not os.path.exists(os.path.expanduser(value)):
            print_error(f"Prefix file not found: {value}")
            return False

        if key == "FILTER_WATCHLIST_ONLY":
            value = value.upper()
            if value not in ("ON", "OFF"):
                print_error(f"Invalid {key} '{value}': must be ON or OFF")
                return False

        if key == "FILTER_CONTINENTS" and value:
            codes = [c.strip().upper() for c in value.split(",") if c.strip()]
            unknown = [c for c in codes if c not in CONTINENTS]
            if unknown:
                print_error(f"Invalid continent(s) {', '.join(unknown)}. Valid: {', '.join(CONTINENTS)}")
                return False
            value = ",".join(codes)

        if key in ("FILTER_CQ_ZONES", "FILTER_ITU_ZONES") and value:
            try:
                FilterConfig.from_dict({FILTER_KEYS[key]: value})
            except ValueError as e:
                print_error(f"Invalid {key} '{value}': {e}")
                return False

        self.settings[key] = value
        self.save()
        return True

    def get(self, key):
        """Get a configuration value."""
        return self.settings.get(key.upper(), "")

    def get_int(self, key):
        """Get an integer setting, falling back to the default on bad data."""
        try:
            return int(self.get(key))
        except ValueError:
            return int(DEFAULT_SETTINGS[key.upper()])

    def sources(self):
        """Configured source names, in order."""
        return [n for n in self.get("SOURCES").split(",") if n in SOURCES]

    def retention(self):
        """Retention window as a timedelta."""
        return timedelta(minutes=self.get_int("RETENTION"))

    def filter_config(self):
        """Build a FilterConfig from the FILTER_* settings."""
        data = {}
        for key, name in FILTER_KEYS.items():
            value = self.get(key)
            if key == "FILTER_WATCHLIST_ONLY":
                data[name] = value.upper() == "ON"
            elif value:
                data[name] = value
        try:
            return FilterConfig.from_dict(data)
        except ValueError as e:
            print_error(f"Ignoring invalid filter settings: {e}")
            return FilterConfig()

    def display(self):
        """Display all settings."""
        print_header("DX Paths Configuration")
        for key in sorted(self.settings.keys()):
            value = self.settings[key]
            if value:
                print_pt(HTML(f"<b>{key:22s}</b> {_sanitize_for_html(value)}"))
            else:
                print_pt(HTML(f"<gray>{key:22s} (not set)</gray>"))
        print_pt("")

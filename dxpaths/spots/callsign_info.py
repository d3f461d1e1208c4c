"""Callsign metadata lookup (country, continent, CQ and ITU zone).

Resolution is by longest matching DXCC prefix. A small built-in table covers
the busiest prefixes; a fuller table can be loaded from a JSON export of
cty.dat.
"""

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Protocol

from ..utils import print_debug, print_error, print_info


@dataclass(frozen=True)
class CallsignInfo:
    """Resolved metadata for a callsign; unknown fields are None."""

    country: Optional[str] = None
    continent: Optional[str] = None
    cq_zone: Optional[int] = None
    itu_zone: Optional[int] = None


UNKNOWN = CallsignInfo()


class CallsignResolver(Protocol):
    """Anything that can resolve a callsign to its metadata."""

    def lookup(self, callsign: str) -> CallsignInfo:
        ...


# prefix -> (country, continent, CQ zone, ITU zone)
DEFAULT_PREFIXES = {
    "K": ("United States", "NA", 5, 8),
    "W": ("United States", "NA", 5, 8),
    "N": ("United States", "NA", 5, 8),
    "AA": ("United States", "NA", 5, 8),
    "AB": ("United States", "NA", 5, 8),
    "AC": ("United States", "NA", 5, 8),
    "AD": ("United States", "NA", 5, 8),
    "AE": ("United States", "NA", 5, 8),
    "AF": ("United States", "NA", 5, 8),
    "AG": ("United States", "NA", 5, 8),
    "AI": ("United States", "NA", 5, 8),
    "AJ": ("United States", "NA", 5, 8),
    "AK": ("United States", "NA", 5, 8),
    "KL7": ("Alaska", "NA", 1, 1),
    "KH6": ("Hawaii", "OC", 31, 61),
    "KP4": ("Puerto Rico", "NA", 8, 11),
    "VE": ("Canada", "NA", 5, 9),
    "VA": ("Canada", "NA", 5, 9),
    "XE": ("Mexico", "NA", 6, 10),
    "CO": ("Cuba", "NA", 8, 11),
    "G": ("England", "EU", 14, 27),
    "M": ("England", "EU", 14, 27),
    "2E": ("England", "EU", 14, 27),
    "GM": ("Scotland", "EU", 14, 27),
    "GW": ("Wales", "EU", 14, 27),
    "GI": ("Northern Ireland", "EU", 14, 27),
    "EI": ("Ireland", "EU", 14, 27),
    "F": ("France", "EU", 14, 27),
    "DL": ("Germany", "EU", 14, 28),
    "DA": ("Germany", "EU", 14, 28),
    "DB": ("Germany", "EU", 14, 28),
    "DC": ("Germany", "EU", 14, 28),
    "DD": ("Germany", "EU", 14, 28),
    "DF": ("Germany", "EU", 14, 28),
    "DG": ("Germany", "EU", 14, 28),
    "DH": ("Germany", "EU", 14, 28),
    "DJ": ("Germany", "EU", 14, 28),
    "DK": ("Germany", "EU", 14, 28),
    "DM": ("Germany", "EU", 14, 28),
    "DO": ("Germany", "EU", 14, 28),
    "EA": ("Spain", "EU", 14, 37),
    "CT": ("Portugal", "EU", 14, 37),
    "I": ("Italy", "EU", 15, 28),
    "ON": ("Belgium", "EU", 14, 27),
    "PA": ("Netherlands", "EU", 14, 27),
    "HB": ("Switzerland", "EU", 14, 28),
    "OE": ("Austria", "EU", 15, 28),
    "OK": ("Czech Republic", "EU", 15, 28),
    "OM": ("Slovak Republic", "EU", 15, 28),
    "SP": ("Poland", "EU", 15, 28),
    "HA": ("Hungary", "EU", 15, 28),
    "S5": ("Slovenia", "EU", 15, 28),
    "9A": ("Croatia", "EU", 15, 28),
    "YO": ("Romania", "EU", 20, 28),
    "LZ": ("Bulgaria", "EU", 20, 28),
    "SV": ("Greece", "EU", 20, 28),
    "OZ": ("Denmark", "EU", 14, 18),
    "LA": ("Norway", "EU", 14, 18),
    "SM": ("Sweden", "EU", 14, 18),
    "OH": ("Finland", "EU", 15, 18),
    "ES": ("Estonia", "EU", 15, 29),
    "UR": ("Ukraine", "EU", 16, 29),
    "UA": ("European Russia", "EU", 16, 29),
    "R": ("European Russia", "EU", 16, 29),
    "UA9": ("Asiatic Russia", "AS", 17, 30),
    "UA0": ("Asiatic Russia", "AS", 19, 33),
    "JA": ("Japan", "AS", 25, 45),
    "JH": ("Japan", "AS", 25, 45),
    "JR": ("Japan", "AS", 25, 45),
    "BY": ("China", "AS", 24, 44),
    "HL": ("South Korea", "AS", 25, 44),
    "BV": ("Taiwan", "AS", 24, 44),
    "VU": ("India", "AS", 22, 41),
    "4X": ("Israel", "AS", 20, 39),
    "9V": ("Singapore", "AS", 28, 54),
    "HS": ("Thailand", "AS", 26, 49),
    "DU": ("Philippines", "OC", 27, 50),
    "YB": ("Indonesia", "OC", 28, 51),
    "VK": ("Australia", "OC", 30, 59),
    "ZL": ("New Zealand", "OC", 32, 60),
    "PY": ("Brazil", "SA", 11, 15),
    "LU": ("Argentina", "SA", 13, 14),
    "CE": ("Chile", "SA", 12, 14),
    "HK": ("Colombia", "SA", 9, 12),
    "YV": ("Venezuela", "SA", 9, 12),
    "OA": ("Peru", "SA", 10, 12),
    "ZS": ("South Africa", "AF", 38, 57),
    "SU": ("Egypt", "AF", 34, 38),
    "5Z": ("Kenya", "AF", 37, 48),
    "5N": ("Nigeria", "AF", 35, 46),
    "CN": ("Morocco", "AF", 33, 37),
    "EA8": ("Canary Islands", "AF", 33, 36),
}

# Distinct callsigns remembered by a resolver
LOOKUP_CACHE_SIZE = 4096

# Portable/operating suffixes that never carry DXCC information
SUFFIX_TRASH = ("/P", "/M", "/MM", "/AM", "/QRP", "/A", "-P", "-M", "-MM", "-QRP")


def clean_callsign(callsign: str) -> str:
    """Strip portable suffixes; keep the DX prefix of ``PREFIX/CALL`` forms."""
    call = (callsign or "").upper().strip()
    for suffix in SUFFIX_TRASH:
        if call.endswith(suffix):
            call = call[:-len(suffix)]
    if "/" in call:
        # Left part is the DXCC-bearing prefix (e.g. "VP2E/K1ABC")
        call = call.split("/")[0]
    return call


def _coerce_int(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class PrefixResolver:
    """Longest-prefix callsign resolver.

    Example:
        resolver = PrefixResolver()
        info = resolver.lookup("G0XYZ")
        info.continent  # "EU"
    """

    def __init__(self, table: Optional[Dict[str, CallsignInfo]] = None):
        if table is None:
            table = {
                prefix: CallsignInfo(country, continent, cq, itu)
                for prefix, (country, continent, cq, itu) in DEFAULT_PREFIXES.items()
            }
        self._table: Dict[str, CallsignInfo] = {}
        self._cached_resolve = lru_cache(maxsize=LOOKUP_CACHE_SIZE)(self._resolve)
        self._max_prefix_len = 0
        self.update(table)

    def update(self, table: Dict[str, CallsignInfo]):
        """Merge prefix entries into the table (later entries win)."""
        for prefix, info in table.items():
            key = prefix.upper().strip()
            if key:
                self._table[key] = info
                self._max_prefix_len = max(self._max_prefix_len, len(key))
        self._cached_resolve.cache_clear()

    def __len__(self):
        return len(self._table)

    def lookup(self, callsign: str) -> CallsignInfo:
        """Resolve a callsign; unknown calls yield an all-None CallsignInfo."""
        if not callsign:
            return UNKNOWN

        call = callsign.upper().strip()
        if not call:
            return UNKNOWN
        return self._cached_resolve(call)

    def _resolve(self, call: str) -> CallsignInfo:
        info = UNKNOWN
        base = clean_callsign(call)
        for candidate in (base, call):
            for length in range(min(len(candidate), self._max_prefix_len), 0, -1):
                match = self._table.get(candidate[:length])
                if match is not None:
                    info = match
                    break
            if info is not UNKNOWN:
                break

        if info is UNKNOWN:
            print_debug(f"No prefix match for {call}", level=6, stations=[call])

        return info

    @classmethod
    def from_file(cls, path: str, include_defaults: bool = True) -> "PrefixResolver":
        """Build a resolver from a JSON prefix table.

        Accepted layouts:
          - {"F": {"country": "France", "continent": "EU", "cq_zone": 14, "itu_zone": 27}, ...}
          - [{"prefix": "F", "country": "France", "continent": "EU", "cqz": 14, "ituz": 27}, ...]

        A missing or unreadable file leaves the built-in table in place.
        """
        resolver = cls() if include_defaults else cls(table={})
        path = os.path.expanduser(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            print_error(f"Could not load prefix table {path}: {e}")
            return resolver

        table = cls._coerce_table(data)
        resolver.update(table)
        print_info(f"Loaded {len(table)} prefixes from {path}")
        return resolver

    @staticmethod
    def _coerce_table(data) -> Dict[str, CallsignInfo]:
        rows = []
        if isinstance(data, dict):
            for prefix, value in data.items():
                if isinstance(value, dict):
                    rows.append((prefix, value))
                else:
                    rows.append((prefix, {"country": str(value)}))
        elif isinstance(data, list):
            for row in data:
                if isinstance(row, dict) and row.get("prefix"):
                    rows.append((str(row["prefix"]), row))

        table: Dict[str, CallsignInfo] = {}
        for prefix, row in rows:
            continent = (row.get("continent") or "").upper().strip() or None
            table[prefix.upper().strip()] = CallsignInfo(
                country=row.get("country") or row.get("name") or None,
                continent=continent if continent != "??" else None,
                cq_zone=_coerce_int(row.get("cq_zone", row.get("cqz"))),
                itu_zone=_coerce_int(row.get("itu_zone", row.get("ituz"))),
            )
        return table

"""Abstract base class for spot sources.

A spot source fetches one batch of raw reports from a reporting network and
translates each record into the canonical raw record layout understood by
Report.from_raw (origin_call, destination_call, frequency_hz, observed_at,
snr, mode, comment, locators and coordinates).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from .. import constants
from ..errors import FetchFailure
from ..utils import print_debug


class SpotSource(ABC):
    """Base class for reporting network adapters.

    Subclasses set ``name`` and ``default_interval`` and implement
    ``_build_url`` and ``_parse_payload``.

    Example usage:
        source = DXClusterSource("http://localhost:3000")
        batch = await source.fetch_batch()
        aggregator.ingest(batch)
    """

    name = "source"
    default_interval = constants.DX_CLUSTER_INTERVAL

    def __init__(self, base_url: str = constants.DEFAULT_SERVER_URL,
                 timeout: int = constants.HTTP_TIMEOUT):
        """Initialize the source.

        Args:
            base_url: Root URL of the spot relay server
            timeout: Total request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limited = False
        self.last_error: Optional[str] = None
        self._last_fetch: Optional[datetime] = None

    @abstractmethod
    def _build_url(self) -> Optional[str]:
        """URL for the next fetch, or None if there is nothing to fetch."""

    @abstractmethod
    def _parse_payload(self, payload: Any) -> List[Dict[str, Any]]:
        """Translate a decoded JSON payload into canonical raw records.

        Raises:
            ValueError: If the payload does not have the expected shape
        """

    def configure(self, **settings) -> bool:
        """Apply source settings; returns True if anything changed.

        Unknown settings raise ValueError.
        """
        if settings:
            raise ValueError(f"{self.name} has no settings: {', '.join(settings)}")
        return False

    async def fetch_batch(self) -> List[Dict[str, Any]]:
        """Fetch one batch of raw records.

        Returns:
            List of canonical raw records (may be empty)

        Raises:
            FetchFailure: On connection errors, non-200 responses or
                undecodable payloads
        """
        url = self._build_url()
        if url is None:
            return []

        print_debug(f"{self.name}: GET {url}", level=3)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        self.last_error = f"HTTP {response.status}"
                        raise FetchFailure(self.name, f"Server returned HTTP {response.status}")

                    payload = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            self.last_error = str(e) or type(e).__name__
            raise FetchFailure(self.name, f"Request failed: {self.last_error}") from e
        except ValueError as e:
            self.last_error = "Invalid JSON"
            raise FetchFailure(self.name, f"Invalid JSON response: {e}") from e

        # Payload parsers may record a relay-side error in last_error
        self.last_error = None
        try:
            records = self._parse_payload(payload)
        except (ValueError, TypeError, AttributeError) as e:
            self.last_error = "Unexpected response"
            raise FetchFailure(self.name, f"Unexpected response: {e}") from e

        self._last_fetch = datetime.now(timezone.utc)
        print_debug(f"{self.name}: received {len(records)} spots", level=3)
        return records

    def _translate_all(self, items: Any) -> List[Dict[str, Any]]:
        """Translate feed items, skipping any that are not objects."""
        if not isinstance(items, list):
            raise ValueError(f"expected a list of spots, got {type(items).__name__}")
        records = []
        for item in items:
            if not isinstance(item, Mapping):
                print_debug(f"{self.name}: skipping non-object spot {item!r}", level=5)
                continue
            records.append(self._translate(item))
        return records

    def _translate(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def get_source_info(self) -> dict:
        """Static information about the source."""
        return {
            "name": self.name,
            "base_url": self.base_url,
            "default_interval": self.default_interval,
            "timeout": self.timeout,
        }

    @property
    def last_fetch_time(self) -> Optional[datetime]:
        """Timestamp of last successful fetch."""
        return self._last_fetch

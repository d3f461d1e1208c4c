"""Periodic refresh of a spot source into an aggregator.

Runs one background task per source. Each cycle fetches a batch and merges
it into the aggregator; a failed fetch leaves the retained spots untouched
and is reported through get_status(). Reconfiguring restarts the cycle
immediately. A fetch already in flight is never cancelled by a
reconfiguration: it runs to completion and its batch is still merged.
Closing the scheduler cancels fetches in flight; their batches are never
merged. An error in one cycle is recorded and the loop carries on.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from .errors import FetchFailure
from .sources.base import SpotSource
from .spots.aggregator import SpotAggregator
from .utils import print_debug, print_error


class RefreshScheduler:
    """Drives periodic fetches from one source into one aggregator.

    Example:
        scheduler = RefreshScheduler(DXClusterSource(url), aggregator)
        await scheduler.start()
        await scheduler.reconfigure(interval=60)
        await scheduler.close()
    """

    def __init__(
        self,
        source: SpotSource,
        aggregator: SpotAggregator,
        interval: Optional[float] = None,
    ):
        """Initialize the scheduler.

        Args:
            source: Spot source to poll
            aggregator: Aggregator receiving fetched batches
            interval: Seconds between fetches (default: the source's own)
        """
        if interval is not None and interval <= 0:
            raise ValueError(f"Interval must be positive: {interval}")

        self.source = source
        self.aggregator = aggregator
        self.interval = interval or source.default_interval

        self.last_update: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.last_stats: Optional[Dict[str, int]] = None
        self.fetch_count = 0
        self.failure_count = 0

        self._update_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def running(self) -> bool:
        return self._update_task is not None and not self._update_task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self):
        """Start periodic updates (first fetch happens immediately)."""
        if self._closed:
            raise RuntimeError(f"Scheduler for {self.source.name} is closed")
        if self.running:
            return  # Already running

        self._update_task = asyncio.create_task(self._update_loop())
        print_debug(
            f"{self.source.name} updates started (interval: {self.interval}s)", level=2
        )

    async def _stop_loop(self):
        """Cancel the timer loop; in-flight fetches keep running."""
        if self._update_task and not self._update_task.done():
            self._update_task.cancel()
            try:
                await self._update_task
            except asyncio.CancelledError:
                pass
        self._update_task = None

    async def reconfigure(self, **settings) -> bool:
        """Apply new settings and restart the refresh cycle immediately.

        Args:
            settings: ``interval`` (seconds) and/or source settings such as
                callsign, minutes, band or direction

        Returns:
            True if any setting changed

        Raises:
            ValueError: If a setting is invalid
        """
        interval = settings.pop("interval", None)
        if interval is not None and interval <= 0:
            raise ValueError(f"Interval must be positive: {interval}")

        changed = self.source.configure(**settings) if settings else False
        if interval is not None and interval != self.interval:
            self.interval = interval
            changed = True

        print_debug(
            f"{self.source.name} reconfigured (interval: {self.interval}s, "
            f"source: {self.source.get_source_info()})",
            level=2,
        )

        if self.running:
            await self._stop_loop()
            self._update_task = asyncio.create_task(self._update_loop())

        return changed

    async def close(self):
        """Tear down; fetches still in flight are cancelled and never merged."""
        if self._closed:
            return
        self._closed = True
        await self._stop_loop()
        if self._inflight:
            print_debug(
                f"{self.source.name}: cancelling {len(self._inflight)} fetch(es) in flight",
                level=3,
            )
            pending = list(self._inflight)
            for fetch in pending:
                fetch.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            self._inflight.clear()
        print_debug(f"{self.source.name} updates stopped", level=2)

    async def refresh_now(self) -> Optional[Dict[str, int]]:
        """Run one fetch and merge cycle.

        Returns:
            Ingest stats, or None if the fetch failed or the scheduler is closed
        """
        if self._closed:
            return None

        fetch = asyncio.ensure_future(self._fetch_and_merge())
        self._inflight.add(fetch)
        fetch.add_done_callback(self._inflight.discard)
        # Shielded so cancelling the timer loop never abandons a started fetch
        try:
            return await asyncio.shield(fetch)
        except asyncio.CancelledError:
            if self._closed and fetch.cancelled():
                return None
            raise

    async def _update_loop(self):
        """Background task for periodic updates."""
        while True:
            try:
                await self.refresh_now()
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                self._record_failure(f"{self.source.name}: {type(e).__name__}: {e}")
                # Continue running despite error
                await asyncio.sleep(self.interval)

    async def _fetch_and_merge(self) -> Optional[Dict[str, int]]:
        self.fetch_count += 1
        try:
            batch = await self.source.fetch_batch()
        except FetchFailure as e:
            self._record_failure(str(e))
            return None
        except Exception as e:
            # Keep running despite unexpected source errors
            self._record_failure(f"{self.source.name}: {type(e).__name__}: {e}")
            return None

        if self._closed:
            print_debug(
                f"{self.source.name}: discarding {len(batch)} spots fetched after close",
                level=3,
            )
            return None

        try:
            stats = self.aggregator.ingest(batch)
        except Exception as e:
            self._record_failure(f"{self.source.name}: merge failed: {type(e).__name__}: {e}")
            return None
        self.last_stats = stats
        self.last_update = datetime.now(timezone.utc)
        self.last_error = self.source.last_error
        return stats

    def _record_failure(self, message: str):
        self.failure_count += 1
        self.last_error = message
        if not self._closed:
            print_error(f"Spot refresh failed: {message}")

    def get_status(self) -> dict:
        """Scheduler status for display.

        Returns:
            Dictionary with running state, timing, error and counters
        """
        return {
            "running": self.running,
            "source": self.source.name,
            "interval": self.interval,
            "last_update": self.last_update,
            "last_error": self.last_error,
            "error": self.last_error is not None,
            "rate_limited": self.source.rate_limited,
            "fetch_count": self.fetch_count,
            "failure_count": self.failure_count,
            "spots": len(self.aggregator),
        }

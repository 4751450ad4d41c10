"""One analysis session: the dataset, its time windows and incremental refresh."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from browsing_insights.config import InsightsSettings
from browsing_insights.exceptions import HistoryFetchError
from browsing_insights.history.ingest import HistoryIngest
from browsing_insights.history.models import Dataset
from browsing_insights.history.provider import HistoryProvider
from browsing_insights.history.timefmt import days_ago, now_ms

logger = logging.getLogger(__name__)

# Added to the last captured visit time so it is not fetched again.
REFRESH_OFFSET_MS = 100


class InsightsSession:
    """Holds the dataset for one user and keeps it current.

    The streamgraph window (``search_start_time``) is fixed when the session
    is created; it bounds the initial load, the gap-filled series and the
    rankings. Later refreshes only fetch visits newer than the dataset's end.

    Args:
        provider: History source.
        settings: Limits; defaults to ``InsightsSettings()``.
        clock: Returns the current time in epoch-ms.
    """

    def __init__(
        self,
        provider: HistoryProvider,
        settings: InsightsSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings or InsightsSettings()
        self.clock = clock
        self.dataset = Dataset()
        self.ingest = HistoryIngest(provider, self.settings)
        self.search_start_time = days_ago(self.settings.streamgraph_lookback_days, clock())
        self.last_error: HistoryFetchError | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def next_since_time(self) -> int:
        end = self.dataset.end_time()
        if end is None:
            return self.search_start_time
        return end + REFRESH_OFFSET_MS

    async def arefresh(self) -> int:
        """Fetch visits newer than the dataset's end.

        Overlapping calls run one at a time, so each starts from the end
        left by the previous one. A failed fetch is logged and kept in
        ``last_error``; the dataset stays as it was and 0 is returned.
        """
        async with self._refresh_lock():
            try:
                added = await self.ingest.arefresh(self.dataset, self.next_since_time())
            except HistoryFetchError as e:
                self.last_error = e
                logger.warning("History refresh failed, serving %d cached visits: %s", len(self.dataset), e)
                return 0
        self.last_error = None
        return added

    def refresh(self) -> int:
        """Synchronous version of arefresh."""
        return asyncio.run(self.arefresh())

    def _refresh_lock(self) -> asyncio.Lock:
        # asyncio.Lock belongs to one event loop; each asyncio.run gets its own.
        loop = asyncio.get_running_loop()
        if self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

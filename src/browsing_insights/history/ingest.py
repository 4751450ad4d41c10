"""Fetch history entries and their visits, join them and append to a dataset."""

from __future__ import annotations

import asyncio
import logging
import time

from browsing_insights.config import InsightsSettings
from browsing_insights.exceptions import HistoryFetchError
from browsing_insights.history.derive import recompute
from browsing_insights.history.domains import host_of, is_displayable, shorten
from browsing_insights.history.models import Dataset, HistoryEntry, VisitEntry, VisitRecord
from browsing_insights.history.provider import HistoryProvider
from browsing_insights.history.timefmt import date_stamp

logger = logging.getLogger(__name__)


def join_visits(entry: HistoryEntry, visits: list[VisitEntry], since_time: int) -> list[VisitRecord]:
    """Merge one history entry with its visits, dropping undisplayable or stale ones."""
    domain = host_of(entry.url)
    short_domain = shorten(domain)
    if not is_displayable(short_domain):
        return []
    return [
        VisitRecord.join(entry, visit, domain, short_domain, date_stamp(visit.visit_time))
        for visit in visits
        if visit.visit_time >= since_time
    ]


class HistoryIngest:
    """Pull new history from a provider into a Dataset.

    Args:
        provider: Where history entries and visits come from.
        settings: Fetch size and dwell cap.
    """

    def __init__(self, provider: HistoryProvider, settings: InsightsSettings | None = None):
        self.provider = provider
        self.settings = settings or InsightsSettings()

    async def arefresh(self, dataset: Dataset, since_time: int) -> int:
        """Append every visit at or after ``since_time``, then re-sort and re-derive.

        One visits lookup runs per history entry, concurrently; nothing is
        appended unless all of them succeed. Returns the number of records added.

        Raises:
            HistoryFetchError: The search or any visits lookup failed.
        """
        started = time.perf_counter()
        try:
            entries, visit_lists = await self._fetch(since_time)
        finally:
            self.provider.release()

        staged: list[VisitRecord] = []
        for entry, visits in zip(entries, visit_lists):
            staged.extend(join_visits(entry, visits, since_time))

        dataset.extend(staged)
        dataset.sort()
        recompute(dataset, self.settings.max_dwell_hours)
        logger.info(
            "Ingested %d visits from %d history entries (dataset: %d) in %.2fs",
            len(staged),
            len(entries),
            len(dataset),
            time.perf_counter() - started,
        )
        return len(staged)

    def refresh(self, dataset: Dataset, since_time: int) -> int:
        """Synchronous version of arefresh."""
        return asyncio.run(self.arefresh(dataset, since_time))

    async def _fetch(self, since_time: int) -> tuple[list[HistoryEntry], list[list[VisitEntry]]]:
        try:
            entries = await self.provider.asearch(
                "", self.settings.max_history_items_per_fetch, since_time
            )
        except HistoryFetchError:
            raise
        except Exception as e:
            raise HistoryFetchError(f"History search failed: {e}") from e
        logger.debug("Found %d history entries since %d", len(entries), since_time)

        # Every lookup finishes before the first failure is raised, so the
        # provider is not released while a lookup still reads from it.
        results = await asyncio.gather(
            *(self._lookup(entry) for entry in entries), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return entries, results

    async def _lookup(self, entry: HistoryEntry) -> list[VisitEntry]:
        try:
            return await self.provider.aget_visits(entry.url)
        except HistoryFetchError:
            raise
        except Exception as e:
            raise HistoryFetchError(f"Visits lookup failed for {entry.url}: {e}") from e

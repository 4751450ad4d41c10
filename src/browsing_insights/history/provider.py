"""Abstract interface for browser history sources."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from browsing_insights.history.models import HistoryEntry, VisitEntry


class HistoryProvider(ABC):
    """Source of history entries and their visits.

    Mirrors the browser history API: ``search`` lists URLs visited since a
    start time, ``get_visits`` lists every visit to one URL.
    """

    @abstractmethod
    def search(self, text: str = "", max_results: int = 100, start_time: int = 0) -> list[HistoryEntry]:
        """History entries whose last visit is at or after ``start_time`` (epoch-ms)."""
        ...

    @abstractmethod
    def get_visits(self, url: str) -> list[VisitEntry]:
        """All visits recorded for ``url``."""
        ...

    def release(self) -> None:
        """Free anything held between a search and its visits lookups.

        Called once at the end of every ingest refresh.
        """

    def __enter__(self) -> HistoryProvider:
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    # ---- Async wrappers (asyncio.to_thread) ----

    async def asearch(self, text: str = "", max_results: int = 100, start_time: int = 0) -> list[HistoryEntry]:
        """Async version of search."""
        return await asyncio.to_thread(self.search, text, max_results, start_time)

    async def aget_visits(self, url: str) -> list[VisitEntry]:
        """Async version of get_visits."""
        return await asyncio.to_thread(self.get_visits, url)


class InMemoryHistoryProvider(HistoryProvider):
    """Serve a fixed set of entries and visits, e.g. from an export file."""

    def __init__(
        self,
        entries: list[HistoryEntry] | None = None,
        visits: dict[str, list[VisitEntry]] | None = None,
    ):
        self.entries: list[HistoryEntry] = list(entries or [])
        self.visits: dict[str, list[VisitEntry]] = {k: list(v) for k, v in (visits or {}).items()}

    def add(self, entry: HistoryEntry, visits: list[VisitEntry]) -> None:
        """Register ``entry`` (replacing one with the same URL) and append its visits."""
        self.entries = [e for e in self.entries if e.url != entry.url]
        self.entries.append(entry)
        self.visits.setdefault(entry.url, []).extend(visits)

    def search(self, text: str = "", max_results: int = 100, start_time: int = 0) -> list[HistoryEntry]:
        needle = text.lower()
        matches = [
            e for e in self.entries
            if e.last_visit_time >= start_time
            and (not needle or needle in e.url.lower() or needle in e.title.lower())
        ]
        matches.sort(key=lambda e: e.last_visit_time, reverse=True)
        return matches[:max_results]

    def get_visits(self, url: str) -> list[VisitEntry]:
        return list(self.visits.get(url, []))

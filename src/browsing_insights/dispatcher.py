"""Route named chart requests to aggregate builders."""

from __future__ import annotations

import logging
import time
from typing import Callable

from browsing_insights import aggregates
from browsing_insights.exceptions import UnknownRequestError
from browsing_insights.session import InsightsSession

logger = logging.getLogger(__name__)

Builder = Callable[[InsightsSession], dict]


def _dwell_by_day(session: InsightsSession) -> dict:
    return aggregates.dwell_by_domain_day(session.dataset, session.settings, session.search_start_time)


def _visits_by_day(session: InsightsSession) -> dict:
    return aggregates.visits_by_domain_day(session.dataset, session.settings, session.search_start_time)


def _active_trace(session: InsightsSession) -> dict:
    start = aggregates.trace_start(session.settings, session.clock())
    return aggregates.active_trace(session.dataset, session.settings, start)


def _time_of_day(session: InsightsSession) -> dict:
    return aggregates.time_of_day(session.dataset, session.settings)


def _word_cloud(session: InsightsSession) -> dict:
    return aggregates.word_cloud(session.dataset, session.settings, session.search_start_time)


def _top_visits(session: InsightsSession) -> dict:
    return aggregates.top_visits(session.dataset, session.settings, session.search_start_time)


ROUTES: dict[str, Builder] = {
    "dwell-by-day": _dwell_by_day,
    "visits-by-day": _visits_by_day,
    "active-trace": _active_trace,
    "time-of-day": _time_of_day,
    "word-cloud": _word_cloud,
    "top-visits": _top_visits,
}


class RequestDispatcher:
    """Refresh the session, then answer one named request.

    Every request first pulls visits newer than the dataset's end, so the
    caller waits for that fetch; a failed fetch is served from the cached
    dataset.
    """

    def __init__(self, session: InsightsSession):
        self.session = session

    @staticmethod
    def request_names() -> list[str]:
        return list(ROUTES)

    def handle(self, name: str) -> dict:
        builder = self._route(name)
        self.session.refresh()
        return self._build(name, builder)

    async def ahandle(self, name: str) -> dict:
        """Async version of handle."""
        builder = self._route(name)
        await self.session.arefresh()
        return self._build(name, builder)

    @staticmethod
    def _route(name: str) -> Builder:
        try:
            return ROUTES[name]
        except KeyError:
            raise UnknownRequestError(
                f"Unknown request {name!r}; expected one of: {', '.join(ROUTES)}"
            ) from None

    def _build(self, name: str, builder: Builder) -> dict:
        started = time.perf_counter()
        result = builder(self.session)
        logger.debug("%s built in %.1f ms", name, (time.perf_counter() - started) * 1000)
        return result

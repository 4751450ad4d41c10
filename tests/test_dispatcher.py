"""Tests for the request dispatcher."""

import asyncio
from datetime import datetime
from unittest.mock import patch

import pytest

from browsing_insights.dispatcher import RequestDispatcher
from browsing_insights.exceptions import UnknownRequestError
from browsing_insights.history.models import HistoryEntry, VisitEntry
from browsing_insights.history.provider import InMemoryHistoryProvider
from browsing_insights.session import InsightsSession


def _ms(*args) -> int:
    return int(datetime(*args).timestamp() * 1000)


NOW = _ms(2024, 6, 4, 15, 0)


@pytest.fixture
def dispatcher():
    p = InMemoryHistoryProvider()
    visits = {
        "https://mail.google.com/": [_ms(2024, 6, 4, 9, 0), _ms(2024, 6, 4, 11, 0)],
        "https://github.com/": [_ms(2024, 6, 4, 10, 0)],
    }
    for url, times in visits.items():
        p.add(
            HistoryEntry(url=url, last_visit_time=max(times)),
            [VisitEntry(visit_id=str(t), visit_time=t) for t in times],
        )
    return RequestDispatcher(InsightsSession(p, clock=lambda: NOW))


def test_request_names():
    assert RequestDispatcher.request_names() == [
        "dwell-by-day",
        "visits-by-day",
        "active-trace",
        "time-of-day",
        "word-cloud",
        "top-visits",
    ]


def test_dwell_by_day(dispatcher):
    result = dispatcher.handle("dwell-by-day")
    assert set(result) == {"series", "numDays", "maxDomains"}
    first = result["series"][0]
    assert first == {"rank": 1, "key": "mail.google.com", "date": "06/04/24", "value": 1.0}


def test_visits_by_day(dispatcher):
    series = dispatcher.handle("visits-by-day")["series"]
    assert {"rank": 1, "key": "mail.google.com", "date": "06/04/24", "value": 2} in series
    assert {"rank": 2, "key": "github.com", "date": "06/05/24", "value": 0} in series


def test_active_trace(dispatcher):
    result = dispatcher.handle("active-trace")
    assert [row["domainName"] for row in result["hourdata"]] == ["mail.google.com", "github.com"]
    # Equal dwell totals: lanes follow first appearance.
    assert [row["lane"] for row in result["chrometimedata"]] == [1, 2]


def test_time_of_day(dispatcher):
    result = dispatcher.handle("time-of-day")
    assert sum(s["rate"] for s in result["timeSlot"]) == 3
    assert sum(c["rate"] for c in result["heatmap"]) == 3


def test_word_cloud(dispatcher):
    assert dispatcher.handle("word-cloud") == {
        "wordList": [{"text": "mail.google", "size": 2}, {"text": "github", "size": 1}]
    }


def test_top_visits(dispatcher):
    assert dispatcher.handle("top-visits") == {
        "history": [{"domain": "mail.google.com", "visits": 2}, {"domain": "github.com", "visits": 1}]
    }


def test_every_request_refreshes_first(dispatcher):
    with patch.object(dispatcher.session, "refresh", return_value=0) as mock_refresh:
        result = dispatcher.handle("top-visits")
    mock_refresh.assert_called_once()
    assert result == {"history": []}


def test_unknown_request(dispatcher):
    with pytest.raises(UnknownRequestError, match="Unknown request 'pie-chart'"):
        dispatcher.handle("pie-chart")


def test_ahandle(dispatcher):
    result = asyncio.run(dispatcher.ahandle("top-visits"))
    assert result["history"][0] == {"domain": "mail.google.com", "visits": 2}


def test_overlapping_ahandle_calls_ingest_once(dispatcher):
    async def both():
        return await asyncio.gather(dispatcher.ahandle("top-visits"), dispatcher.ahandle("top-visits"))

    first, second = asyncio.run(both())
    assert len(dispatcher.session.dataset) == 3
    assert first == second
    assert first["history"][0] == {"domain": "mail.google.com", "visits": 2}

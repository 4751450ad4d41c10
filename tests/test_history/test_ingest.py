"""Tests for history ingest."""

import asyncio
from datetime import datetime

import pytest

from browsing_insights.config import InsightsSettings
from browsing_insights.exceptions import HistoryFetchError
from browsing_insights.history.ingest import HistoryIngest, join_visits
from browsing_insights.history.models import Dataset, HistoryEntry, VisitEntry
from browsing_insights.history.provider import InMemoryHistoryProvider

HOUR = 3_600_000


def _ms(*args) -> int:
    return int(datetime(*args).timestamp() * 1000)


T0 = _ms(2024, 6, 3, 9, 0)


def _entry(url: str, *times: int) -> tuple[HistoryEntry, list[VisitEntry]]:
    entry = HistoryEntry(url=url, title=url, last_visit_time=max(times), visit_count=len(times))
    visits = [VisitEntry(visit_id=f"{url}#{i}", visit_time=t) for i, t in enumerate(times)]
    return entry, visits


@pytest.fixture
def provider():
    p = InMemoryHistoryProvider()
    p.add(*_entry("https://www.a.com/x", T0, T0 + 5 * HOUR))
    p.add(*_entry("https://b.com/y", T0 + 2 * HOUR))
    p.add(*_entry("https://a.com/z", T0 + HOUR))
    return p


def test_join_visits_computes_domains():
    entry, visits = _entry("https://docs.google.com/doc", T0)
    [record] = join_visits(entry, visits, 0)
    assert record.domain == "docs.google.com"
    assert record.short_domain == "docs.google"
    assert record.date_stamp == "06/03/24"
    assert record.visit_time == T0
    assert record.title == "https://docs.google.com/doc"


def test_join_visits_drops_old_visits():
    entry, visits = _entry("https://a.com/", T0, T0 + HOUR)
    records = join_visits(entry, visits, T0 + 1)
    assert [r.visit_time for r in records] == [T0 + HOUR]


def test_join_visits_drops_long_and_empty_short_domains():
    long_host = "https://" + "x" * 31 + ".com/"
    assert join_visits(*_entry(long_host, T0), 0) == []
    assert join_visits(*_entry("https://" + "x" * 30 + ".com/", T0), 0) != []
    assert join_visits(*_entry("not a url", T0), 0) == []
    assert join_visits(*_entry("file:///tmp/page.html", T0), 0) == []


def test_refresh_sorts_and_derives(provider):
    ds = Dataset()
    added = HistoryIngest(provider).refresh(ds, 0)
    assert added == 4
    assert [r.visit_time for r in ds] == [T0, T0 + HOUR, T0 + 2 * HOUR, T0 + 5 * HOUR]
    assert [r.domain for r in ds] == ["www.a.com", "a.com", "b.com", "www.a.com"]
    assert [r.dwell_time for r in ds] == [1.0, 1.0, 3.0, 0]


def test_refresh_honours_since_time(provider):
    ds = Dataset()
    added = HistoryIngest(provider).refresh(ds, T0 + HOUR)
    assert added == 3
    assert ds.start_time() == T0 + HOUR


def test_refresh_passes_fetch_limit():
    seen = {}

    class RecordingProvider(InMemoryHistoryProvider):
        def search(self, text="", max_results=100, start_time=0):
            seen.update(text=text, max_results=max_results, start_time=start_time)
            return super().search(text, max_results, start_time)

    settings = InsightsSettings(max_history_items_per_fetch=7)
    HistoryIngest(RecordingProvider(), settings).refresh(Dataset(), 123)
    assert seen == {"text": "", "max_results": 7, "start_time": 123}


def test_refresh_sorts_out_of_order_completions():
    class SlowFirstProvider(InMemoryHistoryProvider):
        async def aget_visits(self, url):
            # Earliest visits come back last.
            delay = 0.03 if "first" in url else 0.0
            await asyncio.sleep(delay)
            return self.get_visits(url)

    p = SlowFirstProvider()
    p.add(*_entry("https://first.com/", T0))
    p.add(*_entry("https://second.com/", T0 + HOUR))
    p.add(*_entry("https://third.com/", T0 + 2 * HOUR))
    ds = Dataset()
    asyncio.run(HistoryIngest(p).arefresh(ds, 0))
    assert [r.domain for r in ds] == ["first.com", "second.com", "third.com"]


def test_failed_lookup_leaves_dataset_untouched(provider):
    ds = Dataset()
    ingest = HistoryIngest(provider)
    ingest.refresh(ds, 0)
    before = [r.visit_time for r in ds]

    class BrokenProvider(InMemoryHistoryProvider):
        def get_visits(self, url):
            if "b.com" in url:
                raise RuntimeError("connection reset")
            return super().get_visits(url)

    broken = BrokenProvider(provider.entries, provider.visits)
    broken.add(*_entry("https://c.com/", T0 + 6 * HOUR))
    with pytest.raises(HistoryFetchError, match="b.com"):
        HistoryIngest(broken).refresh(ds, 0)
    assert [r.visit_time for r in ds] == before


def test_failed_search_raises_fetch_error():
    class DownProvider(InMemoryHistoryProvider):
        def search(self, text="", max_results=100, start_time=0):
            raise OSError("history unavailable")

    with pytest.raises(HistoryFetchError, match="History search failed"):
        HistoryIngest(DownProvider()).refresh(Dataset(), 0)


def test_empty_history():
    ds = Dataset()
    assert HistoryIngest(InMemoryHistoryProvider()).refresh(ds, 0) == 0
    assert len(ds) == 0
    assert ds.start_time() is None
    assert ds.end_time() is None


def test_provider_released_after_every_refresh(provider):
    class ReleasingProvider(InMemoryHistoryProvider):
        released = 0

        def get_visits(self, url):
            if "b.com" in url and self.fail:
                raise RuntimeError("database is locked")
            return super().get_visits(url)

        def release(self):
            self.released += 1

    p = ReleasingProvider(provider.entries, provider.visits)
    p.fail = False
    ingest = HistoryIngest(p)
    ingest.refresh(Dataset(), 0)
    assert p.released == 1

    p.fail = True
    with pytest.raises(HistoryFetchError):
        ingest.refresh(Dataset(), 0)
    assert p.released == 2

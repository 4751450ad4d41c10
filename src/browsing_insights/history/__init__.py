"""Browser history ingest: providers, domain normalization, derived fields."""

from browsing_insights.history.models import Dataset, HistoryEntry, VisitEntry, VisitRecord
from browsing_insights.history.provider import HistoryProvider, InMemoryHistoryProvider
from browsing_insights.history.chrome import ChromeHistoryProvider
from browsing_insights.history.ingest import HistoryIngest
from browsing_insights.history.domains import host_of, shorten
from browsing_insights.history.derive import recompute

__all__ = [
    "Dataset",
    "HistoryEntry",
    "VisitEntry",
    "VisitRecord",
    "HistoryProvider",
    "InMemoryHistoryProvider",
    "ChromeHistoryProvider",
    "HistoryIngest",
    "host_of",
    "shorten",
    "recompute",
]

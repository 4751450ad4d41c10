"""Visit-count rankings over the lookback window: word cloud and top domains."""

from __future__ import annotations

from browsing_insights.aggregates.grouping import group_count, rank_desc
from browsing_insights.config import InsightsSettings
from browsing_insights.history.models import Dataset


def word_cloud(dataset: Dataset, settings: InsightsSettings, window_start: int) -> dict:
    """Most visited short domains since ``window_start``, as ``{text, size}`` words."""
    counts = group_count(
        (r for r in dataset if r.visit_time > window_start),
        lambda r: r.short_domain,
    )
    return {
        "wordList": [
            {"text": t.key, "size": t.value}
            for t in rank_desc(counts, settings.word_cloud_max_words)
        ]
    }


def top_visits(dataset: Dataset, settings: InsightsSettings, window_start: int) -> dict:
    """Most visited domains since ``window_start``."""
    counts = group_count(
        (r for r in dataset if r.visit_time > window_start),
        lambda r: r.domain,
    )
    return {
        "history": [
            {"domain": t.key, "visits": t.value}
            for t in rank_desc(counts, settings.top_visits_max_domains)
        ]
    }

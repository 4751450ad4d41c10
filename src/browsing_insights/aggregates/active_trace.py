"""Timeline of visit sessions for the top domains, for a Gantt-style chart."""

from __future__ import annotations

import logging

from browsing_insights.aggregates.grouping import group_sum, rank_desc
from browsing_insights.config import InsightsSettings
from browsing_insights.history.models import Dataset
from browsing_insights.history.timefmt import days_ago, since_midnight

logger = logging.getLogger(__name__)


def trace_start(settings: InsightsSettings, now_ms: int) -> int:
    """Lower bound (exclusive, epoch-ms) of the active trace window."""
    if settings.active_trace_since_midnight:
        return since_midnight(settings.active_trace_lookback_days, now_ms)
    return days_ago(settings.active_trace_lookback_days, now_ms)


def active_trace(dataset: Dataset, settings: InsightsSettings, window_start: int) -> dict:
    """Sessions after ``window_start`` that lasted longer than the minimum window.

    Only the domains with the most total dwell are kept. Rows are ordered by
    visit time and projected three ways: ``hourdata`` (HH:MM),
    ``timestampdata`` (full timestamps) and ``chrometimedata`` (epoch-ms
    with the domain's rank as its lane).
    """
    min_window = settings.active_trace_min_window_hours
    candidates = [
        r for r in dataset
        if r.dwell_time > min_window and r.visit_time > window_start
    ]
    top = rank_desc(
        group_sum(candidates, lambda r: r.domain, lambda r: r.dwell_time),
        settings.active_trace_max_domains,
    )
    lanes = {t.key: t.rank for t in top}
    rows = [r for r in candidates if r.domain in lanes][: settings.active_trace_max_data_items]

    logger.debug("Active trace: %d sessions across %d domains", len(rows), len(lanes))
    return {
        "hourdata": [
            {"domainName": r.domain, "start": r.visit_start_time, "end": r.visit_end_time}
            for r in rows
        ],
        "timestampdata": [
            {"domainName": r.domain, "start": r.visit_start_time_stamp, "end": r.visit_end_time_stamp}
            for r in rows
        ],
        "chrometimedata": [
            {"domainName": r.domain, "lane": lanes[r.domain], "start": r.visit_time, "end": r.visit_time_end}
            for r in rows
        ],
    }

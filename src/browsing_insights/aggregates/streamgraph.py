"""Per-domain daily series (dwell hours or visit counts) for the streamgraph chart."""

from __future__ import annotations

import logging
import time
from typing import Callable

from browsing_insights.aggregates.gaps import fill_gaps
from browsing_insights.aggregates.grouping import group_sum, rank_desc
from browsing_insights.config import InsightsSettings
from browsing_insights.history.models import Dataset, VisitRecord
from browsing_insights.history.timefmt import parse_date_stamp

logger = logging.getLogger(__name__)


def dwell_by_domain_day(dataset: Dataset, settings: InsightsSettings, window_start: int) -> dict:
    """Dwell hours per top domain per day.

    Example entry: ``{"rank": 1, "key": "mail.google.com", "date": "03/25/17", "value": 3.17}``.
    Every ranked domain has exactly one entry per date in the window.
    """
    return _domain_day_series(dataset, settings, window_start, lambda r: r.dwell_time, "dwell")


def visits_by_domain_day(dataset: Dataset, settings: InsightsSettings, window_start: int) -> dict:
    """Visit counts per top domain per day, same shape as dwell_by_domain_day."""
    return _domain_day_series(dataset, settings, window_start, lambda r: 1, "visits")


def _domain_day_series(
    dataset: Dataset,
    settings: InsightsSettings,
    window_start: int,
    measure: Callable[[VisitRecord], float],
    label: str,
) -> dict:
    result = {
        "series": [],
        "numDays": settings.streamgraph_lookback_days,
        "maxDomains": settings.streamgraph_max_domains,
    }
    if not len(dataset):
        return result

    started = time.perf_counter()
    top = rank_desc(
        group_sum(dataset, lambda r: r.domain, measure),
        settings.streamgraph_max_domains,
    )
    ranks = {t.key: t.rank for t in top}

    daily = group_sum(
        (r for r in dataset if r.domain in ranks),
        lambda r: (r.domain, r.date_stamp),
        measure,
    )
    series = [
        {"date": date, "key": domain, "value": value, "rank": ranks[domain]}
        for (domain, date), value in daily.items()
    ]

    gap_start = max(window_start, dataset.start_time())
    for t in top:
        fill_gaps(series, gap_start, dataset.end_time(), t.key, t.rank)

    summed = group_sum(series, lambda e: (e["rank"], e["key"], e["date"]), lambda e: e["value"])
    ordered = sorted(summed.items(), key=lambda kv: (kv[0][0], parse_date_stamp(kv[0][2])))
    result["series"] = [
        {"rank": rank, "key": key, "date": date, "value": value}
        for (rank, key, date), value in ordered
    ]
    logger.debug(
        "%s by domain/day: %d domains, %d entries in %.1f ms",
        label,
        len(top),
        len(result["series"]),
        (time.perf_counter() - started) * 1000,
    )
    return result

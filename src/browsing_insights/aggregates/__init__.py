"""Aggregate builders over a visit dataset."""

from browsing_insights.aggregates.streamgraph import dwell_by_domain_day, visits_by_domain_day
from browsing_insights.aggregates.active_trace import active_trace, trace_start
from browsing_insights.aggregates.time_of_day import time_of_day
from browsing_insights.aggregates.rankings import word_cloud, top_visits
from browsing_insights.aggregates.gaps import fill_gaps

__all__ = [
    "dwell_by_domain_day",
    "visits_by_domain_day",
    "active_trace",
    "trace_start",
    "time_of_day",
    "word_cloud",
    "top_visits",
    "fill_gaps",
]

"""Dwell time and session boundaries computed over a sorted dataset."""

from __future__ import annotations

import logging
import time

from browsing_insights.history.models import Dataset
from browsing_insights.history.timefmt import MS_PER_HOUR, date_stamp, time_of_day, time_stamp, to_local

logger = logging.getLogger(__name__)

DEFAULT_MAX_DWELL_HOURS = 4.0

# End time shown for a session that runs past midnight.
END_OF_DAY = "23:59"


def recompute(dataset: Dataset, max_dwell_hours: float = DEFAULT_MAX_DWELL_HOURS) -> None:
    """Recompute every derived field in place. The dataset must be sorted by visit_time."""
    if not len(dataset):
        return
    started = time.perf_counter()
    compute_dwell(dataset, max_dwell_hours)
    compute_sessions(dataset)
    logger.debug(
        "Derived fields for %d records in %.1f ms",
        len(dataset),
        (time.perf_counter() - started) * 1000,
    )


def compute_dwell(dataset: Dataset, max_dwell_hours: float = DEFAULT_MAX_DWELL_HOURS) -> None:
    """How long the user lingered: time until the next visit, capped at max_dwell_hours.

    Dwell is measured against the next visit of any domain. The last visit
    has no successor and gets zero.
    """
    records = dataset.records
    for current, following in zip(records, records[1:]):
        elapsed = following.visit_time - current.visit_time
        current.dwell_time = min(max_dwell_hours, elapsed / MS_PER_HOUR)
        current.visit_time_end = following.visit_time
    last = records[-1]
    last.dwell_time = 0
    last.visit_time_end = last.visit_time


def compute_sessions(dataset: Dataset) -> None:
    """Fill the HH:MM and timestamp start/end strings of every record.

    A session whose next visit falls on a later calendar day ends at 23:59
    so start never displays after end; dwell_time is left as computed.
    """
    records = dataset.records
    start = to_local(records[0].visit_time)
    for current, following in zip(records, records[1:]):
        end = to_local(following.visit_time)
        current.visit_start_time = time_of_day(start)
        current.visit_start_time_stamp = time_stamp(start)
        current.visit_end_time = time_of_day(end)
        current.visit_end_time_stamp = time_stamp(end)
        if date_stamp(start) != date_stamp(end):
            current.visit_end_time = END_OF_DAY
        start = end
    last = records[-1]
    last.visit_start_time = last.visit_end_time = time_of_day(start)
    last.visit_start_time_stamp = last.visit_end_time_stamp = time_stamp(start)

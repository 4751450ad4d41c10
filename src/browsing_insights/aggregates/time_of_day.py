"""Visit counts by time of day and by weekday/hour, over the whole history."""

from __future__ import annotations

from browsing_insights.config import InsightsSettings
from browsing_insights.history.models import Dataset
from browsing_insights.history.timefmt import to_local

MINUTES_PER_DAY = 24 * 60
DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


def time_of_day(dataset: Dataset, settings: InsightsSettings) -> dict:
    """Build the time-slot histogram and the weekday x hour heatmap in one pass.

    ``timeSlot`` has one bucket per interval since local midnight;
    ``heatmap`` cells use ISO weekdays (1 = Monday) and hours 1-24, where
    hour 1 covers 00:00-00:59.
    """
    interval = settings.time_of_day_interval_minutes
    time_slot = [
        {"timeindex": i * interval, "rate": 0, "time": _slot_label(i * interval)}
        for i in range(MINUTES_PER_DAY // interval)
    ]
    heatmap = [
        {"day": day, "hour": hour, "rate": 0}
        for day in range(1, DAYS_PER_WEEK + 1)
        for hour in range(1, HOURS_PER_DAY + 1)
    ]

    for record in dataset:
        local = to_local(record.visit_time)
        minutes = local.hour * 60 + local.minute
        time_slot[minutes // interval]["rate"] += 1
        heatmap[(local.isoweekday() - 1) * HOURS_PER_DAY + local.hour]["rate"] += 1

    return {"timeSlot": time_slot, "heatmap": heatmap}


def _slot_label(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

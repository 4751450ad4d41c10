"""Zero-value padding for per-domain daily series."""

from __future__ import annotations

from datetime import timedelta

from browsing_insights.history.timefmt import MS_PER_DAY, date_stamp, to_local, to_ms


def fill_gaps(series: list[dict], start_time: int, end_time: int, key: str, rank: int) -> None:
    """Append a zero entry for ``key`` on every day from start_time through end_time + 1 day.

    Days that already have a value get a duplicate zero entry; callers sum
    the series by (rank, key, date) afterwards, which removes them.
    """
    limit = end_time + MS_PER_DAY
    t = to_local(start_time)
    while to_ms(t) <= limit:
        series.append({"date": date_stamp(t), "key": key, "value": 0, "rank": rank})
        # Aware arithmetic keeps the wall-clock time across DST changes.
        t = t + timedelta(days=1)

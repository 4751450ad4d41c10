"""Tunable limits for ingest and the aggregate builders."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

from browsing_insights.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "BROWSING_INSIGHTS_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass
class InsightsSettings:
    """Limits applied by the ingest and aggregation stages.

    Args:
        max_history_items_per_fetch: ``maxResults`` passed to the provider search.
        top_visits_max_domains: Bars in the top-visits ranking.
        word_cloud_max_words: Words in the word-cloud ranking.
        time_of_day_interval_minutes: Width of a time-of-day slot; must divide 1440.
        streamgraph_lookback_days: Days of history loaded and charted (0 = all history).
        streamgraph_max_domains: Domains kept in the dwell/visits-by-day series.
        max_dwell_hours: Cap on any single inferred dwell interval.
        active_trace_lookback_days: Days covered by the active trace.
        active_trace_max_domains: Domains kept in the active trace.
        active_trace_min_window_hours: Visits with dwell at or below this are
            left out of the active trace (0.017 h is roughly one minute).
        active_trace_max_data_items: Cap on active-trace rows.
        active_trace_since_midnight: Start the active trace window at local
            midnight instead of exactly N*24h ago.
    """

    max_history_items_per_fetch: int = 100_000
    top_visits_max_domains: int = 35
    word_cloud_max_words: int = 30
    time_of_day_interval_minutes: int = 15
    streamgraph_lookback_days: int = 30
    streamgraph_max_domains: int = 100
    max_dwell_hours: float = 4.0
    active_trace_lookback_days: int = 1
    active_trace_max_domains: int = 100
    active_trace_min_window_hours: float = 0.017
    active_trace_max_data_items: int = 100_000
    active_trace_since_midnight: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError if any limit is out of range."""
        for name in (
            "max_history_items_per_fetch",
            "top_visits_max_domains",
            "word_cloud_max_words",
            "streamgraph_lookback_days",
            "streamgraph_max_domains",
            "active_trace_lookback_days",
            "active_trace_max_domains",
            "active_trace_max_data_items",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.max_dwell_hours <= 0:
            raise ConfigError("max_dwell_hours must be positive")
        if self.active_trace_min_window_hours < 0:
            raise ConfigError("active_trace_min_window_hours must not be negative")
        interval = self.time_of_day_interval_minutes
        if interval <= 0 or (24 * 60) % interval:
            raise ConfigError(
                f"time_of_day_interval_minutes must divide 1440, got {interval}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides) -> InsightsSettings:
        """Build settings from ``BROWSING_INSIGHTS_*`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw, type(getattr(cls, f.name)))
        values.update(overrides)
        settings = cls(**values)
        if values:
            logger.debug("Settings overridden: %s", sorted(values))
        return settings


def _coerce(name: str, raw: str, kind: type):
    text = raw.strip()
    if kind is bool:
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} is not a boolean: {raw!r}")
    try:
        return kind(text)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} is not a valid {kind.__name__}: {raw!r}") from e

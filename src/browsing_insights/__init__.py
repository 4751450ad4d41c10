"""Browsing history aggregates for visualization."""

from browsing_insights.config import InsightsSettings
from browsing_insights.session import InsightsSession
from browsing_insights.dispatcher import RequestDispatcher

__all__ = [
    "InsightsSettings",
    "InsightsSession",
    "RequestDispatcher",
]

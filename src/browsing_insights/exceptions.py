"""Unified exception hierarchy for browsing-insights."""


class InsightsError(Exception):
    """Base exception for all browsing-insights errors."""


# Configuration
class ConfigError(InsightsError):
    """Invalid or unparsable settings."""


# History
class HistoryError(InsightsError):
    """Base exception for history provider and ingest operations."""


class HistoryFetchError(HistoryError):
    """A provider search or visits lookup failed during a refresh."""


class HistoryReadError(HistoryError):
    """Failed to read a local browser history database."""


# Dispatch
class DispatchError(InsightsError):
    """Base exception for request dispatching."""


class UnknownRequestError(DispatchError):
    """No aggregate builder is registered under the requested name."""

# ABOUTME: Exception hierarchy for the monitoring dashboard core.
# ABOUTME: Every error here is recoverable and surfaced to the operator as state.


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class TimeWindowError(DashboardError):
    """Raised when a report time window fails validation."""

    def __init__(self, reason, message):
        super().__init__(message)
        self.reason = reason


class FetchError(DashboardError):
    """Network or backend failure while loading report or snapshot data."""


class ExportError(DashboardError):
    """Failure while generating or saving an export file."""

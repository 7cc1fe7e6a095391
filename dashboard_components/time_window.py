# ABOUTME: Report time window model and the maximum-span validation rule.
# ABOUTME: Pure functions; re-evaluated on every change to start or end.

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from dashboard_components.constants import MAX_WINDOW_SPAN
from dashboard_components.errors import TimeWindowError


class WindowError(Enum):
    SPAN_EXCEEDED = 'span_exceeded'
    INVERTED = 'inverted'


WINDOW_ERROR_MESSAGES = {
    WindowError.SPAN_EXCEEDED: 'Time range exceeds 7 days. Please select a shorter period.',
    WindowError.INVERTED: 'End time must be after start time.',
}


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    @property
    def span(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class WindowValidation:
    reason: Optional[WindowError] = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> Optional[str]:
        if self.reason is None:
            return None
        return WINDOW_ERROR_MESSAGES[self.reason]


def validate_window(window: TimeWindow, max_span: timedelta = MAX_WINDOW_SPAN) -> WindowValidation:
    """
    Validate a report window against the maximum-span rule.

    The span rule is checked before the ordering rule, so a window that
    somehow trips both always reports SPAN_EXCEEDED. A zero-length window
    is valid.

    Args:
        window: Window to check
        max_span: Longest allowed window (inclusive)

    Returns:
        WindowValidation with reason None when the window is usable
    """
    span = window.span
    if span > max_span:
        return WindowValidation(WindowError.SPAN_EXCEEDED)
    if span < timedelta(0):
        return WindowValidation(WindowError.INVERTED)
    return WindowValidation()


def require_valid_window(window: TimeWindow, max_span: timedelta = MAX_WINDOW_SPAN) -> TimeWindow:
    """Return the window unchanged, or raise TimeWindowError if it is invalid."""
    result = validate_window(window, max_span)
    if not result.is_valid:
        raise TimeWindowError(result.reason, result.message)
    return window


def default_window(now: datetime) -> TimeWindow:
    """Start of the current calendar day up to now."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return TimeWindow(start=start, end=now)


def format_timestamp(value: datetime) -> str:
    """Backend wire format: local time, no timezone suffix (2026-02-09T00:00:00)."""
    return value.strftime('%Y-%m-%dT%H:%M:%S')

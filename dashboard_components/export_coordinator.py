# ABOUTME: Coordinates PDF and spreadsheet exports for a report view.
# ABOUTME: One export at a time across both formats; results shown as a short-lived notification.

import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from dashboard_components.constants import EXPORT_NOTIFICATION_SECONDS

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    PDF = 'pdf'
    SPREADSHEET = 'excel'

    @property
    def label(self) -> str:
        return 'PDF' if self is ExportFormat.PDF else 'Excel'

    @property
    def extension(self) -> str:
        return 'pdf' if self is ExportFormat.PDF else 'xlsx'


@dataclass(frozen=True)
class ExportNotification:
    kind: str  # 'success' or 'error'
    message: str
    expires_at: float


class ExportCoordinator:
    """
    Runs exports of the live operator selection.

    The selection and window are read from ``source`` (normally the view's
    ReportQueryEngine) at the moment of the request, not from whatever
    page the table is showing. Only one export runs at a time, whichever
    its format.

    Args:
        exporter: Callable ``(fmt, selection, window)``, sync or async; may raise
        source: Object exposing ``selected_ids``, ``window`` and ``validation``
        clock: Monotonic seconds; injectable for tests
        notification_seconds: Lifetime of the success/failure notification
    """

    def __init__(
        self,
        exporter: Callable[..., Any],
        source,
        clock: Callable[[], float] = time.monotonic,
        notification_seconds: float = EXPORT_NOTIFICATION_SECONDS,
    ):
        self.exporter = exporter
        self.source = source
        self.clock = clock
        self.notification_seconds = notification_seconds
        self.in_flight: Optional[ExportFormat] = None
        self._notification: Optional[ExportNotification] = None

    @property
    def is_exporting(self) -> bool:
        return self.in_flight is not None

    @property
    def notification(self) -> Optional[ExportNotification]:
        note = self._notification
        if note is not None and self.clock() >= note.expires_at:
            self._notification = None
            return None
        return note

    def dismiss_notification(self):
        self._notification = None

    def _notify(self, kind: str, message: str):
        self._notification = ExportNotification(
            kind=kind,
            message=message,
            expires_at=self.clock() + self.notification_seconds,
        )

    async def export_as(self, fmt) -> bool:
        """
        Export the live selection in the given format.

        Returns:
            False if the request was ignored (an export is running or the
            window is invalid), True once the export finished either way
        """
        fmt = ExportFormat(fmt)
        if self.in_flight is not None:
            logger.debug(f"Ignoring {fmt.label} export: {self.in_flight.label} export in flight")
            return False
        if not self.source.validation.is_valid:
            logger.info(f"Ignoring {fmt.label} export: {self.source.validation.message}")
            return False

        selection = tuple(self.source.selected_ids)
        window = self.source.window
        self.in_flight = fmt
        self._notification = None
        try:
            result = self.exporter(fmt, selection, window)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"{fmt.label} export failed: {e}")
            self._notify('error', str(e) or f"Failed to download {fmt.label}")
        else:
            logger.info(f"{fmt.label} export finished for {len(selection) or 'all'} station(s)")
            self._notify('success', f"{fmt.label} downloaded successfully!")
        finally:
            self.in_flight = None
        return True

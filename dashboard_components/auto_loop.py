# ABOUTME: Idle-triggered tab rotation for unattended wall-screen displays.
# ABOUTME: Clock-driven state machine plus an asyncio runner that ticks it.

"""
Auto-loop scheduler

States::

    DISABLED  --viewport >= threshold-->  IDLE_COUNTDOWN
    IDLE_COUNTDOWN  --inactivity elapsed-->  ROTATING
    ROTATING  --each dwell-->  ROTATING (next tab activated)
    IDLE_COUNTDOWN / ROTATING  --activity-->  IDLE_COUNTDOWN (countdown restarted)
    any  --viewport < threshold-->  DISABLED
    any  --close()-->  STOPPED

Time only moves through ``tick()``, so the scheduler can be driven by an
asyncio task (``AutoLoopRunner``), by Streamlit reruns, or by a fake clock
in tests. The scheduler never touches report or snapshot state; it only
calls ``on_activate_tab(tab)``.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from dashboard_components.constants import AUTO_LOOP_PARAMS

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class LoopMode(Enum):
    DISABLED = 'disabled'
    IDLE_COUNTDOWN = 'idle_countdown'
    ROTATING = 'rotating'
    STOPPED = 'stopped'


@dataclass(frozen=True)
class AutoLoopState:
    mode: LoopMode
    is_eligible: bool
    is_idle: bool
    is_rotating: bool
    current_tab_index: Optional[int]
    ms_until_next_action: float


class AutoLoopScheduler:
    """
    Cycles through ``tabs`` after a period without operator activity.

    Args:
        tabs: Rotation order; tabs outside it (e.g. the map) may still be current
        on_activate_tab: Called with the tab id exactly like a manual tab click
        inactivity_ms: Quiet time before rotation starts
        dwell_ms: Time spent on each tab while rotating
        min_viewport_width: Narrower viewports disable the scheduler
        viewport_width: Initial viewport width; None keeps the scheduler disabled
        current_tab: Tab shown when the scheduler is created
        clock: Milliseconds from a monotonic source
    """

    def __init__(
        self,
        tabs: Sequence[str],
        on_activate_tab: Callable[[str], None],
        inactivity_ms: float = AUTO_LOOP_PARAMS['inactivity_ms'],
        dwell_ms: float = AUTO_LOOP_PARAMS['dwell_ms'],
        min_viewport_width: int = AUTO_LOOP_PARAMS['min_viewport_width'],
        viewport_width: Optional[int] = None,
        current_tab: Optional[str] = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        if not tabs:
            raise ValueError("Auto-loop needs at least one tab")
        self.tabs = list(tabs)
        self.on_activate_tab = on_activate_tab
        self.inactivity_ms = inactivity_ms
        self.dwell_ms = dwell_ms
        self.min_viewport_width = min_viewport_width
        self.clock = clock
        self.current_tab = current_tab
        self.mode = LoopMode.DISABLED
        self._deadline: Optional[float] = None
        self._activating = False

        if viewport_width is not None:
            self.update_viewport(viewport_width)

    # ===== Inputs =====

    def update_viewport(self, width: int, now: Optional[float] = None):
        """Re-evaluate eligibility; shrinking below the threshold halts all timing at once."""
        if self.mode is LoopMode.STOPPED:
            return
        if width < self.min_viewport_width:
            if self.mode is not LoopMode.DISABLED:
                logger.info(f"Auto-loop disabled: viewport {width}px < {self.min_viewport_width}px")
            self.mode = LoopMode.DISABLED
            self._deadline = None
        elif self.mode is LoopMode.DISABLED:
            logger.info(f"Auto-loop enabled for {width}px viewport")
            self._restart_countdown(now)

    def record_activity(self, tab: Optional[str] = None, now: Optional[float] = None):
        """
        Register pointer/keyboard activity or manual navigation.

        Args:
            tab: Tab the operator navigated to, if any (need not be in the rotation)
        """
        if tab is not None:
            self.current_tab = tab
        if self.mode in (LoopMode.DISABLED, LoopMode.STOPPED):
            return
        if self._activating:
            # Our own tab activation echoing back through the shared handler
            return
        if self.mode is LoopMode.ROTATING:
            logger.info("Auto-loop halted by operator activity")
        self._restart_countdown(now)

    def tick(self, now: Optional[float] = None) -> int:
        """
        Advance time.

        Returns:
            Number of tabs activated by this tick (0 or 1)
        """
        if self.mode not in (LoopMode.IDLE_COUNTDOWN, LoopMode.ROTATING):
            return 0
        now = self.clock() if now is None else now

        if self.mode is LoopMode.IDLE_COUNTDOWN:
            if now < self._deadline:
                return 0
            logger.info("Auto-loop started after inactivity")
            self.mode = LoopMode.ROTATING
            self._deadline += self.dwell_ms

        if now < self._deadline:
            return 0

        # One step per tick; a late tick (suspended host) does not burst
        self._deadline += self.dwell_ms
        if self._deadline <= now:
            self._deadline = now + self.dwell_ms
        self._activate_next()
        return 1

    def close(self):
        """Teardown: no callback fires after this."""
        self.mode = LoopMode.STOPPED
        self._deadline = None

    # ===== State =====

    def next_tab(self) -> str:
        if self.current_tab in self.tabs:
            index = self.tabs.index(self.current_tab)
            return self.tabs[(index + 1) % len(self.tabs)]
        return self.tabs[0]

    def state(self, now: Optional[float] = None) -> AutoLoopState:
        remaining = 0.0
        if self._deadline is not None:
            now = self.clock() if now is None else now
            remaining = max(0.0, self._deadline - now)
        rotating = self.mode is LoopMode.ROTATING
        return AutoLoopState(
            mode=self.mode,
            is_eligible=self.mode in (LoopMode.IDLE_COUNTDOWN, LoopMode.ROTATING),
            is_idle=rotating,
            is_rotating=rotating,
            current_tab_index=self.tabs.index(self.current_tab) if self.current_tab in self.tabs else None,
            ms_until_next_action=remaining,
        )

    # ===== Internals =====

    def _restart_countdown(self, now: Optional[float]):
        now = self.clock() if now is None else now
        self.mode = LoopMode.IDLE_COUNTDOWN
        self._deadline = now + self.inactivity_ms

    def _activate_next(self):
        tab = self.next_tab()
        self.current_tab = tab
        logger.debug(f"Auto-loop activating tab {tab}")
        self._activating = True
        try:
            self.on_activate_tab(tab)
        finally:
            self._activating = False


class AutoLoopRunner:
    """Drives an AutoLoopScheduler from the running asyncio loop."""

    def __init__(self, scheduler: AutoLoopScheduler, interval: float = AUTO_LOOP_PARAMS['tick_seconds']):
        self.scheduler = scheduler
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self):
        while True:
            try:
                self.scheduler.tick()
            except Exception:
                # A failing tab handler must not kill the heartbeat
                logger.exception("Auto-loop tab activation failed")
            await asyncio.sleep(self.interval)

    async def stop(self):
        """Close the scheduler and cancel the timer task."""
        self.scheduler.close()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

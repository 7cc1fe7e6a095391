# ABOUTME: Tests for the idle tab rotation scheduler and its asyncio runner.
# ABOUTME: Drives the state machine with an injected millisecond clock.

import asyncio
import pytest
from unittest.mock import Mock

from dashboard_components.auto_loop import AutoLoopRunner, AutoLoopScheduler, LoopMode
from dashboard_components.constants import LOOP_TABS, TAB_MAP

WIDE = 2560
NARROW = 1920


def make_scheduler(ms_clock, width=WIDE, current_tab=None):
    activated = []
    scheduler = AutoLoopScheduler(
        LOOP_TABS,
        on_activate_tab=activated.append,
        inactivity_ms=30_000,
        dwell_ms=30_000,
        min_viewport_width=2500,
        viewport_width=width,
        current_tab=current_tab,
        clock=ms_clock,
    )
    return scheduler, activated


class TestEligibility:

    @pytest.mark.unit
    def test_wide_viewport_starts_countdown(self, ms_clock):
        scheduler, _ = make_scheduler(ms_clock)
        state = scheduler.state(now=0)
        assert state.mode is LoopMode.IDLE_COUNTDOWN
        assert state.is_eligible
        assert state.ms_until_next_action == 30_000

    @pytest.mark.unit
    def test_narrow_viewport_never_rotates(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock, width=NARROW)
        for t in range(0, 200_001, 10_000):
            scheduler.tick(now=t)
        assert scheduler.mode is LoopMode.DISABLED
        assert activated == []

    @pytest.mark.unit
    def test_unknown_viewport_keeps_scheduler_disabled(self, ms_clock):
        scheduler = AutoLoopScheduler(LOOP_TABS, on_activate_tab=Mock(), clock=ms_clock)
        assert scheduler.tick(now=10**6) == 0
        assert scheduler.state().is_eligible is False


class TestRotation:

    @pytest.mark.unit
    def test_rotation_starts_after_inactivity(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)

        scheduler.tick(now=29_999)
        assert not scheduler.state(now=29_999).is_rotating

        scheduler.tick(now=30_000)
        state = scheduler.state(now=30_000)
        assert state.is_rotating
        assert state.is_idle
        # Entering rotation does not switch tabs by itself
        assert activated == []

    @pytest.mark.unit
    def test_tabs_advance_once_per_dwell(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)

        scheduler.tick(now=30_000)
        assert scheduler.tick(now=59_999) == 0
        assert scheduler.tick(now=60_000) == 1
        assert scheduler.tick(now=90_000) == 1
        assert scheduler.tick(now=120_000) == 1
        assert scheduler.tick(now=150_000) == 1

        assert activated == LOOP_TABS + LOOP_TABS[:1]

    @pytest.mark.unit
    def test_rotation_continues_from_current_tab(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock, current_tab=LOOP_TABS[1])
        scheduler.tick(now=30_000)
        scheduler.tick(now=60_000)
        assert activated == [LOOP_TABS[2]]

    @pytest.mark.unit
    def test_tab_outside_rotation_goes_to_first_tab(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock, current_tab=TAB_MAP)
        scheduler.tick(now=30_000)
        scheduler.tick(now=60_000)
        assert activated == [LOOP_TABS[0]]
        assert scheduler.state(now=60_000).current_tab_index == 0

    @pytest.mark.unit
    def test_late_tick_fires_once(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)
        scheduler.tick(now=30_000)

        assert scheduler.tick(now=200_000) == 1
        assert len(activated) == 1
        assert scheduler.state(now=200_000).ms_until_next_action == 30_000


class TestActivity:

    @pytest.mark.unit
    def test_activity_just_before_deadline_resets_countdown(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)

        scheduler.record_activity(now=29_999)
        scheduler.tick(now=30_000)
        assert not scheduler.state(now=30_000).is_rotating

        scheduler.tick(now=59_999)
        assert scheduler.state(now=59_999).is_rotating
        assert activated == []

    @pytest.mark.unit
    def test_activity_halts_rotation(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)
        scheduler.tick(now=30_000)
        scheduler.tick(now=60_000)

        scheduler.record_activity(tab=LOOP_TABS[2], now=70_000)

        assert scheduler.mode is LoopMode.IDLE_COUNTDOWN
        assert scheduler.tick(now=90_000) == 0
        assert scheduler.current_tab == LOOP_TABS[2]
        assert len(activated) == 1

    @pytest.mark.unit
    def test_own_activation_is_not_activity(self, ms_clock):
        holder = {}

        def on_activate(tab):
            # Same handler a manual tab click goes through
            holder['scheduler'].record_activity(tab=tab)

        scheduler = AutoLoopScheduler(
            LOOP_TABS, on_activate_tab=on_activate,
            viewport_width=WIDE, clock=ms_clock,
        )
        holder['scheduler'] = scheduler

        scheduler.tick(now=30_000)
        scheduler.tick(now=60_000)

        assert scheduler.mode is LoopMode.ROTATING
        assert scheduler.tick(now=90_000) == 1
        assert scheduler.current_tab == LOOP_TABS[1]


class TestTeardown:

    @pytest.mark.unit
    def test_viewport_shrink_while_rotating_stops_callbacks(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)
        scheduler.tick(now=30_000)
        scheduler.tick(now=60_000)

        scheduler.update_viewport(NARROW, now=65_000)

        for t in range(90_000, 400_001, 30_000):
            scheduler.tick(now=t)
        assert len(activated) == 1
        assert scheduler.state(now=400_000).is_eligible is False

    @pytest.mark.unit
    def test_widening_again_restarts_countdown(self, ms_clock):
        scheduler, _ = make_scheduler(ms_clock, width=NARROW)
        scheduler.update_viewport(WIDE, now=5_000)
        assert scheduler.state(now=5_000).ms_until_next_action == 30_000

    @pytest.mark.unit
    def test_close_stops_everything(self, ms_clock):
        scheduler, activated = make_scheduler(ms_clock)
        scheduler.close()

        scheduler.record_activity(now=1_000)
        scheduler.update_viewport(WIDE, now=1_000)
        assert scheduler.tick(now=10**6) == 0
        assert scheduler.mode is LoopMode.STOPPED
        assert activated == []


class TestAutoLoopRunner:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_runner_ticks_until_stopped(self):
        scheduler = Mock()
        runner = AutoLoopRunner(scheduler, interval=0.001)

        runner.start()
        await asyncio.sleep(0.05)
        await runner.stop()

        assert scheduler.tick.call_count >= 2
        scheduler.close.assert_called_once()
        assert runner.running is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_tick_does_not_kill_runner(self):
        scheduler = Mock()
        scheduler.tick.side_effect = RuntimeError('tab handler failed')
        runner = AutoLoopRunner(scheduler, interval=0.001)

        runner.start()
        await asyncio.sleep(0.05)
        assert runner.running
        await runner.stop()

        assert scheduler.tick.call_count >= 2

"""Unit tests for focuskeeper.models.focus.clock.SessionClock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from focuskeeper.models.exceptions import InvalidStateError, ValidationError
from focuskeeper.models.focus import (
    BREAK,
    FOCUS,
    ClockState,
    FocusSession,
    SessionClock,
    TimerSettings,
)


def _clock(**session_fields) -> SessionClock:
    now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    session = FocusSession(**session_fields) if session_fields else None
    return SessionClock(session=session, now=lambda: now)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    def test_default_is_idle_focus_with_full_countdown(self):
        clock = _clock()
        assert clock.state is ClockState.IDLE_FOCUS
        assert clock.seconds_remaining == 1500
        assert clock.session.completed_focus_phases == 0
        assert clock.session.linked_task_id is None

    def test_default_sized_from_settings(self):
        clock = SessionClock(settings=TimerSettings(10, 2))
        assert clock.seconds_remaining == 600

    def test_progress_zero_at_start(self):
        assert _clock().progress == 0.0


# ---------------------------------------------------------------------------
# start / pause
# ---------------------------------------------------------------------------


class TestStartPause:
    def test_start_from_idle_focus(self):
        clock = _clock()
        assert clock.start() is True
        assert clock.state is ClockState.RUNNING_FOCUS

    def test_start_twice_is_noop(self):
        clock = _clock()
        clock.start()
        assert clock.start() is False
        assert clock.state is ClockState.RUNNING_FOCUS

    def test_start_from_idle_break(self):
        clock = _clock(phase=BREAK, seconds_remaining=300)
        clock.start()
        assert clock.state is ClockState.RUNNING_BREAK

    def test_pause_keeps_remaining(self):
        clock = _clock()
        clock.start()
        clock.tick()
        assert clock.pause() is True
        assert clock.state is ClockState.IDLE_FOCUS
        assert clock.seconds_remaining == 1499

    def test_pause_when_idle_is_noop(self):
        clock = _clock()
        assert clock.pause() is False
        assert clock.seconds_remaining == 1500

    def test_start_touches_updated_at(self):
        clock = _clock()
        clock.start()
        assert clock.session.updated_at == "2024-03-01T09:00:00+00:00"


# ---------------------------------------------------------------------------
# tick
# ---------------------------------------------------------------------------


class TestTick:
    def test_tick_decrements_by_one(self):
        clock = _clock(seconds_remaining=100, is_running=True)
        assert clock.tick() is None
        assert clock.seconds_remaining == 99

    def test_tick_ignored_when_idle(self):
        clock = _clock(seconds_remaining=100)
        assert clock.tick() is None
        assert clock.seconds_remaining == 100

    def test_tick_at_one_completes_focus(self):
        clock = _clock(seconds_remaining=1, is_running=True, completed_focus_phases=2)
        completion = clock.tick()

        assert completion is not None
        assert completion.previous_phase == FOCUS
        assert clock.state is ClockState.IDLE_BREAK
        assert clock.seconds_remaining == 300
        assert clock.session.completed_focus_phases == 3

    def test_tick_at_one_completes_break(self):
        clock = _clock(phase=BREAK, seconds_remaining=1, is_running=True, completed_focus_phases=1)
        completion = clock.tick()

        assert completion.previous_phase == BREAK
        assert completion.focus_minutes == 0
        assert clock.state is ClockState.IDLE_FOCUS
        assert clock.seconds_remaining == 1500
        assert clock.session.completed_focus_phases == 1

    def test_full_focus_phase_takes_1500_ticks(self):
        clock = _clock()
        clock.start()

        completions = [c for c in (clock.tick() for _ in range(1500)) if c is not None]

        assert len(completions) == 1
        assert clock.phase == BREAK
        assert clock.seconds_remaining == 300
        assert clock.session.completed_focus_phases == 1
        assert clock.is_running is False

    def test_ticks_after_completion_are_ignored(self):
        clock = _clock(seconds_remaining=1, is_running=True)
        clock.tick()
        for _ in range(10):
            assert clock.tick() is None
        assert clock.seconds_remaining == 300


# ---------------------------------------------------------------------------
# complete_phase
# ---------------------------------------------------------------------------


class TestCompletePhase:
    def test_credits_linked_task_on_focus(self):
        clock = _clock(linked_task_id="t1", is_running=True)
        completion = clock.complete_phase()
        assert completion.task_credited is True
        assert completion.linked_task_id == "t1"

    def test_no_credit_without_link(self):
        completion = _clock(is_running=True).complete_phase()
        assert completion.task_credited is False
        assert completion.linked_task_id is None

    def test_break_never_credits(self):
        completion = _clock(phase=BREAK, linked_task_id="t1").complete_phase()
        assert completion.task_credited is False

    def test_serial_increments(self):
        clock = _clock()
        first = clock.complete_phase()
        second = clock.complete_phase()
        assert (first.serial, second.serial) == (1, 2)
        assert clock.session.completion_serial == 2

    def test_completion_carries_focus_minutes_and_date(self):
        clock = _clock()
        clock.apply_settings(40, 10)
        completion = clock.complete_phase()
        assert completion.focus_minutes == 40
        assert completion.completed_on.isoformat() == "2024-03-01"

    def test_notifies_listeners(self):
        clock = _clock(linked_task_id="t1")
        listener = MagicMock()
        clock.add_listener(listener)

        clock.complete_phase()

        listener.on_phase_completed.assert_called_once_with(FOCUS, True)

    def test_listener_without_hook_is_skipped(self):
        clock = _clock()
        clock.add_listener(object())
        clock.complete_phase()  # does not raise

    def test_removed_listener_not_called(self):
        clock = _clock()
        listener = MagicMock()
        clock.add_listener(listener)
        clock.remove_listener(listener)
        clock.complete_phase()
        listener.on_phase_completed.assert_not_called()


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------


class TestReset:
    @pytest.mark.parametrize(
        "fields",
        [
            {"phase": BREAK, "seconds_remaining": 12, "is_running": True},
            {"phase": FOCUS, "seconds_remaining": 900, "completed_focus_phases": 4},
            {"linked_task_id": "t1", "completion_serial": 7},
        ],
    )
    def test_reset_from_any_state(self, fields):
        clock = _clock(**fields)
        clock.reset()

        assert clock.state is ClockState.IDLE_FOCUS
        assert clock.seconds_remaining == 1500
        assert clock.session.completed_focus_phases == 0
        assert clock.session.linked_task_id is None

    def test_reset_keeps_serial(self):
        clock = _clock(completion_serial=7)
        clock.reset()
        assert clock.session.completion_serial == 7

    def test_apply_settings_then_reset(self):
        clock = _clock()
        clock.apply_settings(10, 2)
        clock.reset()
        assert clock.seconds_remaining == 600


# ---------------------------------------------------------------------------
# apply_settings
# ---------------------------------------------------------------------------


class TestApplySettings:
    def test_idle_focus_countdown_resized(self):
        clock = _clock()
        clock.apply_settings(50, 10)
        assert clock.seconds_remaining == 3000

    def test_running_countdown_untouched(self):
        clock = _clock(is_running=True, seconds_remaining=1000)
        clock.apply_settings(50, 10)
        assert clock.seconds_remaining == 1000
        assert clock.settings.focus_minutes == 50

    def test_idle_break_resized_only_when_break_changes(self):
        clock = _clock(phase=BREAK, seconds_remaining=120)
        clock.apply_settings(30, 5)
        assert clock.seconds_remaining == 120
        clock.apply_settings(30, 15)
        assert clock.seconds_remaining == 900

    def test_next_phase_uses_new_duration(self):
        clock = _clock(is_running=True, seconds_remaining=1)
        clock.apply_settings(25, 12)
        clock.tick()
        assert clock.seconds_remaining == 720

    @pytest.mark.parametrize("focus,brk", [(0, 5), (61, 5), (25, 0), (25, 31)])
    def test_out_of_range_rejected_without_mutation(self, focus, brk):
        clock = _clock()
        with pytest.raises(ValidationError):
            clock.apply_settings(focus, brk)
        assert clock.settings == TimerSettings()
        assert clock.seconds_remaining == 1500

    def test_clamp_mode(self):
        clock = _clock()
        settings = clock.apply_settings(90, 0, clamp=True)
        assert (settings.focus_minutes, settings.break_minutes) == (60, 1)


# ---------------------------------------------------------------------------
# link_task
# ---------------------------------------------------------------------------


class TestLinkTask:
    def test_link_when_idle(self):
        clock = _clock()
        clock.link_task("t1")
        assert clock.session.linked_task_id == "t1"

    def test_unlink(self):
        clock = _clock(linked_task_id="t1")
        clock.link_task(None)
        assert clock.session.linked_task_id is None

    def test_link_while_running_rejected(self):
        clock = _clock(is_running=True)
        with pytest.raises(InvalidStateError):
            clock.link_task("t1")
        assert clock.session.linked_task_id is None


def test_progress_midway():
    clock = _clock(seconds_remaining=750)
    assert clock.progress == pytest.approx(0.5)


def test_completed_on_uses_injected_clock():
    moments = iter([datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc) + timedelta(minutes=i) for i in range(5)])
    current = {"now": next(moments)}
    clock = SessionClock(now=lambda: current["now"])
    current["now"] = next(moments)
    assert clock.complete_phase().completed_on.isoformat() == "2024-03-02"

"""Session clock: the focus/break countdown state machine.

The clock owns a ``FocusSession`` and ``TimerSettings`` and mutates them in
response to commands and once-per-second ticks. It does no I/O and keeps no
timers of its own; scheduling and persistence belong to
``focuskeeper.services.focus_service``.

States::

    IDLE_FOCUS --start--> RUNNING_FOCUS --0s--> IDLE_BREAK --start--> RUNNING_BREAK
        ^                     |  pause                                   |
        +---------------------+                                          |
        +------------------------------- 0s -----------------------------+

``reset`` returns to IDLE_FOCUS from anywhere.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

from focuskeeper.models.exceptions import InvalidStateError

from .session import BREAK, FOCUS, ClockState, FocusSession, Phase, TimerSettings


class PhaseListener(Protocol):
    """Receives clock events; every method is optional."""

    def on_phase_completed(self, previous_phase: Phase, task_credited: bool) -> None: ...


@dataclass(frozen=True)
class PhaseCompletion:
    """A phase that ran down to zero."""

    previous_phase: Phase
    task_credited: bool
    linked_task_id: str | None
    focus_minutes: int
    serial: int
    completed_on: date

    @property
    def was_focus(self) -> bool:
        return self.previous_phase == FOCUS


def local_now() -> datetime:
    return datetime.now().astimezone()


class SessionClock:
    """Countdown and phase transitions for one user's session."""

    def __init__(
        self,
        session: FocusSession | None = None,
        settings: TimerSettings | None = None,
        now: Callable[[], datetime] = local_now,
    ):
        self.settings = settings or TimerSettings()
        self.session = session or FocusSession.default(self.settings)
        self._now = now
        self._listeners: list[PhaseListener] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> ClockState:
        return self.session.state

    @property
    def phase(self) -> Phase:
        return self.session.phase

    @property
    def is_running(self) -> bool:
        return self.session.is_running

    @property
    def seconds_remaining(self) -> int:
        return self.session.seconds_remaining

    @property
    def phase_length(self) -> int:
        """Configured length of the current phase in seconds."""
        return self.settings.seconds_for(self.session.phase)

    @property
    def progress(self) -> float:
        """Fraction of the current phase that has elapsed, 0.0 to 1.0."""
        total = self.phase_length
        if total <= 0:
            return 0.0
        elapsed = total - self.session.seconds_remaining
        return max(0.0, min(1.0, elapsed / total))

    def add_listener(self, listener: PhaseListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: PhaseListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start counting down the current phase.

        Returns:
            False if the clock was already running
        """
        if self.session.is_running:
            return False
        self.session.is_running = True
        self._touch()
        return True

    def pause(self) -> bool:
        """Stop counting down, keeping the remaining time.

        Returns:
            False if the clock was not running
        """
        if not self.session.is_running:
            return False
        self.session.is_running = False
        self._touch()
        return True

    def tick(self) -> PhaseCompletion | None:
        """Advance the countdown by one second.

        Ignored while idle. Returns the completion event when this tick
        brought the countdown to zero.
        """
        if not self.session.is_running:
            return None

        if self.session.seconds_remaining > 1:
            self.session.seconds_remaining -= 1
            self._touch()
            return None

        # Zero is never observable while running: completion takes its place.
        self.session.seconds_remaining = 0
        return self.complete_phase()

    def complete_phase(self) -> PhaseCompletion:
        """Finish the current phase and stop at the start of the next one."""
        session = self.session
        previous = session.phase
        credited = False

        if previous == FOCUS:
            session.completed_focus_phases += 1
            credited = session.linked_task_id is not None

        completion = PhaseCompletion(
            previous_phase=previous,
            task_credited=credited,
            linked_task_id=session.linked_task_id if credited else None,
            focus_minutes=self.settings.focus_minutes if previous == FOCUS else 0,
            serial=session.completion_serial + 1,
            completed_on=self._now().date(),
        )

        session.phase = BREAK if previous == FOCUS else FOCUS
        session.seconds_remaining = self.settings.seconds_for(session.phase)
        session.is_running = False
        session.completion_serial = completion.serial
        self._touch()

        for listener in list(self._listeners):
            handler = getattr(listener, "on_phase_completed", None)
            if handler is not None:
                handler(previous, credited)

        return completion

    def reset(self) -> None:
        """Return to an idle, unlinked focus phase with a full countdown."""
        session = self.session
        session.is_running = False
        session.linked_task_id = None
        session.completed_focus_phases = 0
        session.phase = FOCUS
        session.seconds_remaining = self.settings.seconds_for(FOCUS)
        self._touch()

    def apply_settings(
        self, focus_minutes: int, break_minutes: int, *, clamp: bool = False
    ) -> TimerSettings:
        """Change the phase durations.

        A running countdown keeps its remaining time; the new durations take
        effect at the next phase. When idle in a phase whose duration
        changed, the countdown is resized to the new duration.

        Args:
            focus_minutes: Focus length, 1-60
            break_minutes: Break length, 1-30
            clamp: Pull out-of-range values to the nearest bound instead of
                rejecting them

        Raises:
            ValidationError: If a value is out of range and clamp is False
        """
        if clamp:
            new = TimerSettings.clamped(focus_minutes, break_minutes)
        else:
            new = TimerSettings.validated(focus_minutes, break_minutes)

        old = self.settings
        self.settings = new

        phase = self.session.phase
        if not self.session.is_running and old.seconds_for(phase) != new.seconds_for(phase):
            self.session.seconds_remaining = new.seconds_for(phase)
        self._touch()
        return new

    def link_task(self, task_id: str | None) -> None:
        """Choose the task credited when the next focus phase completes.

        Raises:
            InvalidStateError: While the clock is running
        """
        if self.session.is_running:
            raise InvalidStateError("Pause the timer before changing the linked task")
        self.session.linked_task_id = task_id
        self._touch()

    def _touch(self) -> None:
        self.session.updated_at = self._now().isoformat()

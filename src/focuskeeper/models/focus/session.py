"""Focus session and timer settings records."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from focuskeeper.models.exceptions import ValidationError

Phase = Literal["focus", "break"]

FOCUS: Phase = "focus"
BREAK: Phase = "break"

FOCUS_MINUTES_RANGE = (1, 60)
BREAK_MINUTES_RANGE = (1, 30)

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5

# camelCase keys written by the web dashboard for the same document.
_LEGACY_KEYS = {
    "taskId": "linked_task_id",
    "timeRemaining": "seconds_remaining",
    "isActive": "is_running",
    "completedPomodoros": "completed_focus_phases",
}


class ClockState(str, Enum):
    """Observable state of the session clock."""

    IDLE_FOCUS = "idle_focus"
    RUNNING_FOCUS = "running_focus"
    IDLE_BREAK = "idle_break"
    RUNNING_BREAK = "running_break"

    @classmethod
    def of(cls, phase: Phase, is_running: bool) -> ClockState:
        if phase == FOCUS:
            return cls.RUNNING_FOCUS if is_running else cls.IDLE_FOCUS
        return cls.RUNNING_BREAK if is_running else cls.IDLE_BREAK


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


@dataclass
class TimerSettings:
    """Per-user focus and break durations, in minutes."""

    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES

    @classmethod
    def clamped(cls, focus_minutes: int, break_minutes: int) -> TimerSettings:
        """Build settings, pulling out-of-range values to the nearest bound."""
        return cls(
            focus_minutes=_clamp(int(focus_minutes), FOCUS_MINUTES_RANGE),
            break_minutes=_clamp(int(break_minutes), BREAK_MINUTES_RANGE),
        )

    @classmethod
    def validated(cls, focus_minutes: int, break_minutes: int) -> TimerSettings:
        """Build settings, rejecting out-of-range values.

        Raises:
            ValidationError: If either duration is not an integer in range
        """
        for name, value, (low, high) in (
            ("focus", focus_minutes, FOCUS_MINUTES_RANGE),
            ("break", break_minutes, BREAK_MINUTES_RANGE),
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name} duration must be a whole number of minutes")
            if not low <= value <= high:
                raise ValidationError(
                    f"{name} duration must be between {low} and {high} minutes, got {value}"
                )
        return cls(focus_minutes=focus_minutes, break_minutes=break_minutes)

    def seconds_for(self, phase: Phase) -> int:
        """Full length of a phase in seconds."""
        minutes = self.focus_minutes if phase == FOCUS else self.break_minutes
        return minutes * 60

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> TimerSettings:
        # The web dashboard nests these under timerSettings
        if "timerSettings" in data:
            data = data["timerSettings"]
        focus = data.get("focus_minutes", data.get("focusDuration", DEFAULT_FOCUS_MINUTES))
        brk = data.get("break_minutes", data.get("breakDuration", DEFAULT_BREAK_MINUTES))
        return cls.clamped(focus, brk)


@dataclass
class FocusSession:
    """The single in-progress timer record of a user."""

    seconds_remaining: int = DEFAULT_FOCUS_MINUTES * 60
    is_running: bool = False
    completed_focus_phases: int = 0
    phase: Phase = FOCUS
    linked_task_id: str | None = None
    completion_serial: int = 0
    updated_at: str | None = None  # ISO 8601

    @classmethod
    def default(cls, settings: TimerSettings | None = None) -> FocusSession:
        """A fresh idle focus session sized from *settings*."""
        settings = settings or TimerSettings()
        return cls(seconds_remaining=settings.seconds_for(FOCUS))

    @property
    def state(self) -> ClockState:
        return ClockState.of(self.phase, self.is_running)

    @property
    def updated_datetime(self) -> datetime | None:
        """Parse updated_at as datetime."""
        if self.updated_at:
            return datetime.fromisoformat(self.updated_at.replace("Z", "+00:00"))
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FocusSession:
        """Create from a stored document, tolerating legacy and unknown keys."""
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            key = _LEGACY_KEYS.get(key, key)
            if key in cls.__dataclass_fields__:
                normalized[key] = value

        session = cls(**normalized)
        session.seconds_remaining = max(0, int(session.seconds_remaining))
        session.completed_focus_phases = max(0, int(session.completed_focus_phases))
        session.is_running = bool(session.is_running)
        if session.phase not in (FOCUS, BREAK):
            session.phase = FOCUS
        return session

    def copy(self) -> FocusSession:
        return FocusSession(**self.to_dict())

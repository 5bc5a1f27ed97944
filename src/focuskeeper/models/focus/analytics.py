"""Productivity statistics derived from completed focus phases."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any

from .goals import DailyGoal

DAILY_AVERAGE_WINDOW_DAYS = 30


@dataclass
class ProductivityStats:
    """Running aggregate counters for one user."""

    total_completed_phases: int = 0
    total_focus_minutes: int = 0
    longest_streak_days: int = 0
    daily_average_minutes: int = 0
    current_streak_days: int = 0
    last_focus_date: str | None = None  # YYYY-MM-DD
    last_credited_serial: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProductivityStats:
        """Create from a stored document; camelCase dashboard keys are accepted."""
        return cls(
            total_completed_phases=int(
                data.get("total_completed_phases", data.get("totalPomodoros", 0))
            ),
            total_focus_minutes=int(
                data.get("total_focus_minutes", data.get("totalFocusTime", 0))
            ),
            longest_streak_days=int(
                data.get("longest_streak_days", data.get("longestStreak", 0))
            ),
            daily_average_minutes=int(
                data.get("daily_average_minutes", data.get("dailyAverage", 0))
            ),
            current_streak_days=int(data.get("current_streak_days", 0)),
            last_focus_date=data.get("last_focus_date"),
            last_credited_serial=int(data.get("last_credited_serial", 0)),
        )

    @property
    def total_focus_hours(self) -> int:
        return round_half_up(self.total_focus_minutes / 60)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def recompute_daily_average(
    total_completed_phases: int,
    focus_duration_minutes: int,
    window_days: int = DAILY_AVERAGE_WINDOW_DAYS,
) -> int:
    """
    Average focus minutes per day over a fixed window.

    The window does not depend on account age, and the current focus
    duration is applied to every completed phase.
    """
    if window_days <= 0:
        raise ValueError("window_days must be positive")
    return round_half_up(total_completed_phases * focus_duration_minutes / window_days)


def update_streak(stats: ProductivityStats, day: date) -> None:
    """Extend, keep or restart the consecutive-day streak for a focus on *day*."""
    last = date.fromisoformat(stats.last_focus_date) if stats.last_focus_date else None

    if last == day:
        pass
    elif last is not None and last + timedelta(days=1) == day:
        stats.current_streak_days += 1
    elif last is not None and day < last:
        # Late write for an earlier day; the streak is already past it
        return
    else:
        stats.current_streak_days = 1

    stats.last_focus_date = day.isoformat()
    stats.longest_streak_days = max(stats.longest_streak_days, stats.current_streak_days)


def apply_focus_completion(
    stats: ProductivityStats,
    goal: DailyGoal,
    focus_minutes: int,
    day: date,
    window_days: int = DAILY_AVERAGE_WINDOW_DAYS,
    serial: int | None = None,
) -> bool:
    """Fold one completed focus phase into the day's goal and the aggregates.

    With a *serial*, each record is only updated when its
    ``last_credited_serial`` is older, and the marker is advanced with it.

    Returns:
        True if either record changed
    """
    changed = False
    if serial is None or serial > goal.last_credited_serial:
        goal.achieved += 1
        if serial is not None:
            goal.last_credited_serial = serial
        changed = True

    if serial is None or serial > stats.last_credited_serial:
        stats.total_completed_phases += 1
        stats.total_focus_minutes += focus_minutes
        stats.daily_average_minutes = recompute_daily_average(
            stats.total_completed_phases, focus_minutes, window_days
        )
        update_streak(stats, day)
        if serial is not None:
            stats.last_credited_serial = serial
        changed = True
    return changed

"""Focus mode - Pomodoro session clock, goals and statistics."""

from .analytics import ProductivityStats, recompute_daily_average
from .clock import PhaseCompletion, PhaseListener, SessionClock
from .goals import DailyGoal
from .session import BREAK, FOCUS, ClockState, FocusSession, Phase, TimerSettings

__all__ = [
    "FOCUS",
    "BREAK",
    "Phase",
    "ClockState",
    "FocusSession",
    "TimerSettings",
    "SessionClock",
    "PhaseCompletion",
    "PhaseListener",
    "DailyGoal",
    "ProductivityStats",
    "recompute_daily_average",
]

"""FocusKeeper - Pomodoro focus timer with persistent sessions and goals."""

__version__ = "0.3.0"

"""Tests for the console phase notifier."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from focuskeeper.models.focus import BREAK, FOCUS
from focuskeeper.services.notification_service import ConsoleNotifier, completion_message


def _notifier(bell: bool = False) -> tuple[ConsoleNotifier, StringIO]:
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=False, width=100)
    return ConsoleNotifier(console, bell=bell), buffer


def test_completion_messages():
    assert completion_message(FOCUS) == ("Pomodoro Complete!", "Time for a break!")
    assert completion_message(BREAK) == ("Break Complete!", "Time to focus!")


def test_focus_completion_printed():
    notifier, buffer = _notifier()
    notifier.on_phase_completed(FOCUS, False)
    assert "Pomodoro Complete! Time for a break!" in buffer.getvalue()
    assert "credited" not in buffer.getvalue()


def test_credit_mentioned():
    notifier, buffer = _notifier()
    notifier.on_phase_completed(FOCUS, True)
    assert "Linked task credited" in buffer.getvalue()


def test_bell_rung_when_enabled(mocker):
    notifier, _ = _notifier(bell=True)
    bell = mocker.patch.object(notifier.console, "bell")
    notifier.on_phase_completed(BREAK, False)
    bell.assert_called_once()


def test_persistence_error_warning():
    notifier, buffer = _notifier()
    notifier.on_persistence_error(RuntimeError("disk full"))
    assert "progress not saved (disk full)" in buffer.getvalue()

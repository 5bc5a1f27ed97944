"""Non-blocking single-key input for the live timer."""

import select
import sys
import termios
import tty


class KeyboardHandler:
    """Reads single keypresses from a terminal in cbreak mode.

    When stdin is not a terminal every read returns None.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.old_settings = None
        self.interactive = False
        self._setup()

    def _setup(self):
        """Put the terminal into cbreak mode, remembering the old settings."""
        try:
            fd = self.stream.fileno()
            self.old_settings = termios.tcgetattr(fd)
            tty.setcbreak(fd)
            self.interactive = True
        except (termios.error, OSError, ValueError):
            # Not a tty (piped input, test runner)
            self.interactive = False

    def get_key(self) -> str | None:
        """Return the pressed key in lower case, or None if nothing is waiting."""
        if not self.interactive:
            return None
        readable, _, _ = select.select([self.stream], [], [], 0)
        if not readable:
            return None
        key = self.stream.read(1)
        return key.lower() if key else None

    def stop(self):
        """Restore terminal settings."""
        if self.old_settings is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self.old_settings)
            self.old_settings = None

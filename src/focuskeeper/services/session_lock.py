"""Cross-process ownership of a user's focus session.

Only the process holding a user's lock loads the clock for writing: it
catches up, ticks and credits completions. The lock is an exclusive,
non-blocking ``flock`` on ``<data dir>/locks/<user>.lock``. The kernel
drops it when the holder exits, so a crashed ``focus run`` leaves no stale
owner behind. The file body records the holder's pid for error messages.
"""

from __future__ import annotations

import fcntl
import json
import os
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

LOCKS_DIRNAME = "locks"


def lock_name(user_id: str) -> str:
    """File name of a user's lock; unsafe characters become underscores."""
    return re.sub(r"[^A-Za-z0-9_.-]", "_", user_id) + ".lock"


class SessionLock:
    """Exclusive lock on one user's focus session."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fd: int | None = None

    @classmethod
    def for_user(cls, data_dir: str | Path, user_id: str) -> SessionLock:
        return cls(Path(data_dir) / LOCKS_DIRNAME / lock_name(user_id))

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        """Take the lock without waiting.

        Returns:
            True if this instance holds the lock afterwards
        """
        if self._fd is not None:
            return True

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o600)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            return False
        except OSError:
            os.close(fd)
            raise

        self._fd = fd
        self._write_owner()
        return True

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            os.ftruncate(fd, 0)
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def owner(self) -> dict[str, Any] | None:
        """Pid and acquisition time written by the current holder, if any."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return None

    def _write_owner(self) -> None:
        body = json.dumps(
            {"pid": os.getpid(), "acquired_at": datetime.now(UTC).isoformat()}
        )
        os.ftruncate(self._fd, 0)
        os.lseek(self._fd, 0, os.SEEK_SET)
        os.write(self._fd, body.encode("utf-8"))

"""Tests for the cross-process session lock."""

from __future__ import annotations

import os
import stat

from focuskeeper.services.session_lock import SessionLock, lock_name


class TestSessionLock:
    def test_acquire_and_release(self, tmp_path):
        lock = SessionLock.for_user(tmp_path, "u1")

        assert lock.acquire() is True
        assert lock.held is True
        assert lock.acquire() is True  # re-entrant for the holder

        lock.release()
        assert lock.held is False

    def test_second_holder_refused_until_release(self, tmp_path):
        first = SessionLock.for_user(tmp_path, "u1")
        second = SessionLock.for_user(tmp_path, "u1")

        assert first.acquire() is True
        assert second.acquire() is False
        assert second.held is False

        first.release()
        assert second.acquire() is True
        second.release()

    def test_users_do_not_share_locks(self, tmp_path):
        a = SessionLock.for_user(tmp_path, "u1")
        b = SessionLock.for_user(tmp_path, "u2")

        assert a.acquire() and b.acquire()
        a.release()
        b.release()

    def test_owner_records_pid(self, tmp_path):
        lock = SessionLock.for_user(tmp_path, "u1")
        assert lock.owner() is None

        lock.acquire()
        owner = SessionLock.for_user(tmp_path, "u1").owner()
        assert owner["pid"] == os.getpid()
        assert "acquired_at" in owner

        lock.release()
        assert lock.owner() is None

    def test_lock_file_is_private(self, tmp_path):
        lock = SessionLock.for_user(tmp_path, "u1")
        lock.acquire()

        assert lock.path == tmp_path / "locks" / "u1.lock"
        assert stat.S_IMODE(os.stat(lock.path).st_mode) == 0o600
        lock.release()

    def test_release_without_acquire(self, tmp_path):
        SessionLock.for_user(tmp_path, "u1").release()


def test_lock_name_sanitizes_user_id():
    assert lock_name("local-user") == "local-user.lock"
    assert lock_name("team/alice@example.com") == "team_alice_example.com.lock"

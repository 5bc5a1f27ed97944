"""Focus service - the authoritative per-user timer.

Owns one ``SessionClock``, drives it with an event-loop tick, and persists
every state change through a ``SequentialWriter``. In-memory state is
authoritative: a failed write is reported, never rolled back.

A completed focus phase produces a *completion unit*: the day's goal and the
productivity stats are updated in memory, then written in a fixed order
(task counter, daily goal, stats, session). Each of those records stores the
serial of the newest completion it counts, so a unit that is retried, or
replayed from a stale session after a restart, is never credited twice.

One process at a time runs a user's clock. ``load`` takes the user's
``SessionLock``; a service that did not get it is read-only.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any

from focuskeeper.models.config_models import FocusConfig
from focuskeeper.models.exceptions import (
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    SessionBusyError,
    ValidationError,
)
from focuskeeper.models.focus import (
    DailyGoal,
    FocusSession,
    PhaseCompletion,
    PhaseListener,
    ProductivityStats,
    SessionClock,
    TimerSettings,
)
from focuskeeper.models.focus.analytics import apply_focus_completion
from focuskeeper.models.focus.clock import local_now
from focuskeeper.repositories import FocusRepository, TaskRepository
from focuskeeper.services.session_lock import SessionLock
from focuskeeper.services.write_queue import SequentialWriter
from focuskeeper.utils.logger import get_logger

SESSION_KEY = "session"
SETTINGS_KEY = "settings"


@dataclass
class CompletionUnit:
    """Progress of one completion's writes."""

    completion: PhaseCompletion
    task_credited: bool = False
    attempts: int = 0


class FocusService:
    """Timer, goal and statistics orchestration for one user."""

    def __init__(
        self,
        user_id: str,
        repository: FocusRepository,
        task_repository: TaskRepository | None = None,
        config: FocusConfig | None = None,
        now: Callable[[], datetime] = local_now,
        lock: SessionLock | None = None,
    ):
        self.user_id = user_id
        self.repository = repository
        self.task_repository = task_repository
        self.config = config or FocusConfig()
        self._now = now
        self._lock = lock

        self.clock = SessionClock(now=now)
        self.stats = ProductivityStats()
        self._goals: dict[str, DailyGoal] = {}
        self._listeners: list[Any] = []
        self._writer = SequentialWriter()
        self._tick_handle: asyncio.TimerHandle | None = None
        self._failed_units: dict[int, CompletionUnit] = {}
        self._loaded = False
        self._read_only = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def read_only(self) -> bool:
        """True when another process owns this user's session."""
        return self._read_only

    async def load(self) -> None:
        """Read session, settings, stats and today's goal from storage.

        A session left running by an earlier process is caught up by the
        wall-clock time that passed since it was last saved. When another
        process holds the session lock, the stored state is only displayed.
        """
        self._cancel_tick()
        self._read_only = self._lock is not None and not self._lock.acquire()
        if self._read_only:
            get_logger("focus").info(
                "session of %s is owned by %s; loading read-only",
                self.user_id,
                self._owner_description(),
            )

        settings = await self.repository.load_settings(self.user_id) or TimerSettings()
        session = await self.repository.load_session(self.user_id)
        if session is None:
            session = FocusSession.default(settings)
        self.stats = await self.repository.load_stats(self.user_id) or ProductivityStats()

        self.clock = SessionClock(session, settings, now=self._now)
        for listener in self._listeners:
            self.clock.add_listener(listener)

        self._goals = {}
        await self._goal_for(self.today)
        self._loaded = True

        if self._read_only:
            return
        if session.is_running and self.config.catch_up_on_load:
            self._catch_up()
        self._schedule_tick()

    async def close(self) -> None:
        """Stop ticking, wait for queued writes and give up the session lock."""
        self._cancel_tick()
        try:
            await self._writer.drain()
        finally:
            if self._lock is not None:
                self._lock.release()

    def add_listener(self, listener: PhaseListener) -> None:
        """Register a listener for phase completions and persistence errors."""
        self._listeners.append(listener)
        self.clock.add_listener(listener)

    def remove_listener(self, listener: PhaseListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        self.clock.remove_listener(listener)

    def ensure_owner(self) -> None:
        """Raise SessionBusyError unless this process may change the session."""
        if self._read_only:
            raise SessionBusyError(
                f"Focus session is running in {self._owner_description()}"
            )

    def _owner_description(self) -> str:
        owner = self._lock.owner() if self._lock is not None else None
        pid = (owner or {}).get("pid")
        return f"another process (pid {pid})" if pid else "another process"

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def today(self) -> date:
        return self._now().date()

    @property
    def session(self) -> FocusSession:
        return self.clock.session

    @property
    def settings(self) -> TimerSettings:
        return self.clock.settings

    @property
    def daily_goal(self) -> DailyGoal:
        """Today's goal; an unsaved default when it was never loaded."""
        goal = self._goals.get(self.today.isoformat())
        if goal is None:
            return DailyGoal.for_day(self.user_id, self.today, self.config.default_daily_target)
        return goal

    @property
    def ticking(self) -> bool:
        return self._tick_handle is not None

    @property
    def pending_units(self) -> list[CompletionUnit]:
        return list(self._failed_units.values())

    def status(self) -> dict[str, Any]:
        """Snapshot of the timer for display."""
        goal = self.daily_goal
        return {
            "state": self.clock.state.value,
            "phase": self.clock.phase,
            "is_running": self.clock.is_running,
            "seconds_remaining": self.clock.seconds_remaining,
            "progress": self.clock.progress,
            "completed_focus_phases": self.session.completed_focus_phases,
            "linked_task_id": self.session.linked_task_id,
            "focus_minutes": self.settings.focus_minutes,
            "break_minutes": self.settings.break_minutes,
            "goal_target": goal.target,
            "goal_achieved": goal.achieved,
            "pending_writes": len(self._failed_units),
            "read_only": self._read_only,
        }

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Start or resume the countdown; a no-op when already running."""
        self.ensure_owner()
        changed = self.clock.start()
        self._schedule_tick()
        if changed:
            get_logger("focus").info("focus %s started for %s", self.clock.phase, self.user_id)
            await self._persist_session()
        return changed

    async def pause(self) -> bool:
        """Pause the countdown; a no-op when idle."""
        self.ensure_owner()
        self._cancel_tick()
        changed = self.clock.pause()
        if changed:
            await self._persist_session()
        return changed

    async def reset(self) -> None:
        """Return to a fresh idle focus phase. Aggregates are untouched.

        The abandoned phase can no longer be replayed, so the completion
        serial moves past every serial the stored records already count.
        """
        self.ensure_owner()
        self._cancel_tick()
        self.clock.reset()
        self.session.completion_serial = max(
            self.session.completion_serial, self._credited_serial()
        )
        await self._persist_session()

    async def apply_settings(
        self, focus_minutes: int, break_minutes: int, *, clamp: bool = False
    ) -> TimerSettings:
        """Change phase durations and persist them.

        Raises:
            ValidationError: Out-of-range value with clamp disabled
            PersistenceError: The new settings are kept in memory regardless
        """
        self.ensure_owner()
        settings = self.clock.apply_settings(focus_minutes, break_minutes, clamp=clamp)
        settings_saved = self._writer.submit(
            SETTINGS_KEY,
            lambda: self.repository.save_settings(self.user_id, replace(self.settings)),
        )
        session_saved = self._submit_session()
        await asyncio.gather(settings_saved, session_saved)
        return settings

    async def link_task(self, task_id: str | None) -> None:
        """Link the task credited by the next focus completion (None unlinks).

        Raises:
            InvalidStateError: While the timer is running
            NotFoundError: Unknown task id
        """
        self.ensure_owner()
        if self.clock.is_running:
            raise InvalidStateError("Pause the timer before changing the linked task")
        if task_id is not None and self.task_repository is not None:
            await self.task_repository.get(task_id)
        self.clock.link_task(task_id)
        await self._persist_session()

    async def set_daily_target(self, target: int) -> DailyGoal:
        """Change today's target number of focus phases.

        Allowed from a read-only service; the owning process takes the stored
        target over at its next completion.
        """
        if isinstance(target, bool) or not isinstance(target, int) or target < 0:
            raise ValidationError(f"Daily target must be a non-negative integer, got {target!r}")
        goal = await self._goal_for(self.today)
        goal.target = target
        await self._writer.submit(
            ("goal", goal.date), self._goal_writer(goal.date)
        )
        return goal

    async def goal_history(self, days: int = 7) -> list[DailyGoal]:
        """Stored goals for the last *days* days, oldest first."""
        since = self.today - timedelta(days=max(days, 1) - 1)
        return await self.repository.list_daily_goals(self.user_id, since)

    async def retry_failed_writes(self) -> int:
        """Re-submit completion units whose writes failed.

        Returns:
            Number of units still pending afterwards
        """
        self.ensure_owner()
        units = sorted(self._failed_units.values(), key=lambda u: u.completion.serial)
        futures = [self._submit_unit(unit) for unit in units]
        results = await asyncio.gather(*futures, return_exceptions=True)
        for unit, result in zip(units, results):
            if isinstance(result, Exception):
                get_logger("focus").warning(
                    "retry of completion %d failed: %s", unit.completion.serial, result
                )
        return len(self._failed_units)

    async def wait_idle(self) -> None:
        """Wait for every queued write to finish."""
        await self._writer.drain()

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def _schedule_tick(self) -> None:
        if self._tick_handle is not None or not self.clock.is_running:
            return
        loop = asyncio.get_running_loop()
        self._tick_handle = loop.call_later(self.config.tick_interval_seconds, self._on_tick)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick(self) -> None:
        self._tick_handle = None
        completion = self.clock.tick()
        if completion is not None:
            self._on_completion(completion)
        else:
            self._watch(self._submit_session())
        self._schedule_tick()

    def _catch_up(self) -> None:
        updated = self.session.updated_datetime
        if updated is None:
            return
        now = self._now()
        if updated.tzinfo is None and now.tzinfo is not None:
            updated = updated.replace(tzinfo=now.tzinfo)
        elapsed = int((now - updated).total_seconds())
        if elapsed <= 0:
            return

        steps = min(elapsed, self.clock.seconds_remaining)
        get_logger("focus").info("catching up %ds of missed focus time", steps)
        for _ in range(steps):
            completion = self.clock.tick()
            if completion is not None:
                self._on_completion(completion)
                break

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _submit_session(self) -> asyncio.Future:
        return self._writer.submit(
            SESSION_KEY,
            lambda: self.repository.save_session(self.user_id, self.session.copy()),
        )

    async def _persist_session(self) -> None:
        await self._submit_session()

    def _goal_writer(self, day: str):
        async def write() -> None:
            await self.repository.save_daily_goal(self.user_id, replace(self._goals[day]))

        return write

    async def _goal_for(self, day: date) -> DailyGoal:
        key = day.isoformat()
        if key not in self._goals:
            goal = await self.repository.load_daily_goal(self.user_id, day)
            if goal is None:
                goal = DailyGoal.for_day(self.user_id, day, self.config.default_daily_target)
            self._goals[key] = goal
        return self._goals[key]

    def _credited_serial(self) -> int:
        """Newest completion serial counted by any loaded record."""
        return max(
            [self.stats.last_credited_serial]
            + [goal.last_credited_serial for goal in self._goals.values()]
        )

    async def _refresh_aggregates(self, day: date) -> DailyGoal:
        """Adopt stored stats and goal counts newer than the in-memory ones.

        The stored goal's target always wins; it may have been set by a
        read-only process.
        """
        stored_stats = await self.repository.load_stats(self.user_id)
        if (
            stored_stats is not None
            and stored_stats.last_credited_serial > self.stats.last_credited_serial
        ):
            self.stats = stored_stats

        goal = await self._goal_for(day)
        stored_goal = await self.repository.load_daily_goal(self.user_id, day)
        if stored_goal is not None:
            if stored_goal.last_credited_serial > goal.last_credited_serial:
                goal.achieved = stored_goal.achieved
                goal.last_credited_serial = stored_goal.last_credited_serial
            goal.target = stored_goal.target
        return goal

    def _on_completion(self, completion: PhaseCompletion) -> None:
        get_logger("focus").info(
            "%s phase completed for %s (serial %d, task credited: %s)",
            completion.previous_phase,
            self.user_id,
            completion.serial,
            completion.task_credited,
        )
        self._watch(self._submit_unit(CompletionUnit(completion)))

    def _submit_unit(self, unit: CompletionUnit) -> asyncio.Future:
        return self._writer.submit(
            ("completion", unit.completion.serial), lambda: self._write_unit(unit)
        )

    async def _write_unit(self, unit: CompletionUnit) -> None:
        completion = unit.completion
        unit.attempts += 1
        try:
            if completion.was_focus:
                goal = await self._refresh_aggregates(completion.completed_on)
                counted = apply_focus_completion(
                    self.stats,
                    goal,
                    completion.focus_minutes,
                    completion.completed_on,
                    self.config.stats_window_days,
                    serial=completion.serial,
                )
                if not counted:
                    get_logger("focus").info(
                        "completion %d already counted; rewriting records only",
                        completion.serial,
                    )

            if completion.task_credited and not unit.task_credited:
                await self._credit_task(completion.linked_task_id, completion.serial)
                unit.task_credited = True

            if completion.was_focus:
                await self._goal_writer(completion.completed_on.isoformat())()
                await self.repository.save_stats(self.user_id, replace(self.stats))
            await self.repository.save_session(self.user_id, self.session.copy())
        except PersistenceError:
            self._failed_units[completion.serial] = unit
            raise
        self._failed_units.pop(completion.serial, None)

    async def _credit_task(self, task_id: str | None, serial: int) -> None:
        if task_id is None or self.task_repository is None:
            return
        try:
            credited = await self.task_repository.increment_pomodoro_count(
                task_id, credit_serial=serial
            )
        except NotFoundError:
            get_logger("focus").warning("linked task %s no longer exists; not credited", task_id)
            return
        if not credited:
            get_logger("focus").info("task %s already credited for completion %d", task_id, serial)

    def _watch(self, future: asyncio.Future) -> None:
        future.add_done_callback(self._report_background_failure)

    def _report_background_failure(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return
        get_logger("focus").error("background write failed for %s: %s", self.user_id, error)
        for listener in list(self._listeners):
            handler = getattr(listener, "on_persistence_error", None)
            if handler is not None:
                handler(error)


# ----------------------------------------------------------------------
# Per-process registry
# ----------------------------------------------------------------------

_services: dict[str, FocusService] = {}


def get_focus_service(
    user_id: str,
    repository: FocusRepository | None = None,
    task_repository: TaskRepository | None = None,
    config: FocusConfig | None = None,
    lock: SessionLock | None = None,
) -> FocusService:
    """Return the one FocusService for *user_id* in this process.

    Anything not passed comes from the active storage context, including the
    cross-process session lock under the data directory.
    """
    service = _services.get(user_id)
    if service is None:
        if repository is None or task_repository is None or config is None:
            from focuskeeper.services.config_service import get_config_service

            config_service = get_config_service()
            storage = config_service.storage_strategy_context
            repository = repository or storage.focus_repository
            task_repository = task_repository or storage.task_repository
            config = config or config_service.config.focus
            lock = lock or SessionLock.for_user(config_service.data_dir, user_id)
        service = FocusService(user_id, repository, task_repository, config, lock=lock)
        _services[user_id] = service
    return service


async def close_focus_services() -> None:
    """Close and forget every registered service."""
    services = list(_services.values())
    _services.clear()
    for service in services:
        await service.close()


def reset_focus_services() -> None:
    """Forget every registered service without closing it."""
    _services.clear()


@asynccontextmanager
async def open_focus_service(
    listener: PhaseListener | None = None,
) -> AsyncIterator[FocusService]:
    """Load the active context's FocusService for the duration of a command."""
    from focuskeeper.services.config_service import get_config_service

    user_id = get_config_service().get_current_context().user_id
    service = get_focus_service(user_id)
    if listener is not None:
        service.add_listener(listener)
    try:
        await service.load()
        yield service
    finally:
        await service.close()
        if listener is not None:
            service.remove_listener(listener)

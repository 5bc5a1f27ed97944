"""Daily focus goals."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

DEFAULT_DAILY_TARGET = 8


def goal_id(user_id: str, day: date | str) -> str:
    """Document id of a user's goal for *day*."""
    day_str = day.isoformat() if isinstance(day, date) else day
    return f"{user_id}_{day_str}"


@dataclass
class DailyGoal:
    """Target and achieved focus phases for one user on one calendar date."""

    user_id: str
    date: str  # YYYY-MM-DD
    target: int = DEFAULT_DAILY_TARGET
    achieved: int = 0
    last_credited_serial: int = 0  # newest completion counted in `achieved`

    @classmethod
    def for_day(
        cls, user_id: str, day: date, target: int = DEFAULT_DAILY_TARGET
    ) -> DailyGoal:
        return cls(user_id=user_id, date=day.isoformat(), target=target)

    @property
    def id(self) -> str:
        return goal_id(self.user_id, self.date)

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    @property
    def progress_percent(self) -> float:
        """Share of the target reached, capped at 100."""
        if self.target <= 0:
            return 0.0
        return min(100.0, self.achieved / self.target * 100)

    @property
    def is_met(self) -> bool:
        return self.target > 0 and self.achieved >= self.target

    @property
    def remaining(self) -> int:
        return max(0, self.target - self.achieved)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any], user_id: str | None = None) -> DailyGoal:
        return cls(
            user_id=data.get("user_id") or data.get("userId") or user_id or "",
            date=data["date"],
            target=int(data.get("target", DEFAULT_DAILY_TARGET)),
            achieved=int(data.get("achieved", 0)),
            last_credited_serial=int(data.get("last_credited_serial", 0)),
        )


def summarize_goals(goals: list[DailyGoal]) -> dict[str, Any]:
    """
    Summarize a run of daily goals.

    Args:
        goals: Goals in any order

    Returns:
        Dict with days tracked, days met, total achieved and hit rate
    """
    days = len(goals)
    met = sum(1 for g in goals if g.is_met)
    total = sum(g.achieved for g in goals)
    return {
        "days": days,
        "days_met": met,
        "total_achieved": total,
        "hit_rate": (met / days * 100) if days else 0.0,
        "best_day": max(goals, key=lambda g: g.achieved).date if goals else None,
    }

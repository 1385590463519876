"""
Typed records for habits, log entries and milestones.

Rows coming out of SQLite are converted here so the rest of the code never
guesses at optional keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Iterable, List, Mapping, Optional, Set

from .calendar_utils import WEEKDAY_NAMES, safe_day_key


class FrequencyType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SPECIFIC_DAYS = "specific_days"


class LogStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


class MilestoneStatus(str, Enum):
    CURRENT = "current"
    UPCOMING = "upcoming"
    ARCHIVED = "archived"


def parse_days(raw: str) -> Set[int]:
    """
    Convert '0,1,2' -> {0,1,2}. Empty string -> empty set.
    """
    raw = (raw or "").strip()
    if not raw:
        return set()
    out = set()
    for p in raw.split(","):
        p = p.strip()
        if p == "":
            continue
        try:
            out.add(int(p))
        except ValueError:
            continue
    return out


def days_to_string(days: Iterable[int]) -> str:
    return ",".join(str(d) for d in sorted(set(days)))


@dataclass(frozen=True)
class Habit:
    id: int
    name: str
    frequency_type: FrequencyType = FrequencyType.DAILY
    frequency_value: Optional[int] = None
    frequency_days: FrozenSet[int] = frozenset()
    created_at: Optional[datetime] = None
    is_active: bool = True
    target_date: Optional[date] = None
    description: str = ""

    @property
    def created_day(self) -> Optional[date]:
        return safe_day_key(self.created_at)

    def frequency_label(self) -> str:
        """
        Display text for the recurrence rule. The rule is descriptive only.
        """
        if self.frequency_type is FrequencyType.WEEKLY:
            return f"{self.frequency_value or 1}x per week"
        if self.frequency_type is FrequencyType.SPECIFIC_DAYS:
            if not self.frequency_days:
                return "No days picked"
            return ", ".join(WEEKDAY_NAMES[d] for d in sorted(self.frequency_days))
        return "Daily"

    @classmethod
    def from_row(cls, row: Mapping) -> "Habit":
        created_raw = row["created_at"]
        try:
            created_at = datetime.fromisoformat(created_raw) if created_raw else None
        except ValueError:
            created_at = None
        target_raw = row["target_date"]
        return cls(
            id=int(row["id"]),
            name=row["name"],
            frequency_type=FrequencyType(row["frequency_type"]),
            frequency_value=row["frequency_value"],
            frequency_days=frozenset(parse_days(row["frequency_days"])),
            created_at=created_at,
            is_active=bool(row["is_active"]),
            target_date=date.fromisoformat(target_raw) if target_raw else None,
            description=row["description"] or "",
        )


@dataclass(frozen=True)
class LogEntry:
    id: int
    habit_id: int
    day: date
    status: LogStatus

    @property
    def completed(self) -> bool:
        return self.status is LogStatus.COMPLETED

    @classmethod
    def from_row(cls, row: Mapping) -> "LogEntry":
        return cls(
            id=int(row["id"]),
            habit_id=int(row["habit_id"]),
            day=date.fromisoformat(row["day"]),
            status=LogStatus(row["status"]),
        )


@dataclass(frozen=True)
class Milestone:
    id: int
    title: str
    start_date: date
    end_date: date

    def status_on(self, today: date) -> MilestoneStatus:
        if today < self.start_date:
            return MilestoneStatus.UPCOMING
        if self.end_date < today:
            return MilestoneStatus.ARCHIVED
        return MilestoneStatus.CURRENT

    @classmethod
    def from_row(cls, row: Mapping) -> "Milestone":
        return cls(
            id=int(row["id"]),
            title=row["title"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
        )


@dataclass
class HabitWithLogs:
    habit: Habit
    logs: List[LogEntry] = field(default_factory=list)

    def log_on(self, day: date) -> Optional[LogEntry]:
        for entry in self.logs:
            if entry.day == day:
                return entry
        return None

"""
Read model for the UI.

recompute_snapshot() derives every display value from plain records;
load_snapshot() does the full reload from storage first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from . import db
from .calendar_utils import day_key
from .celebration import all_completed_today
from .metrics import (
    MilestoneProgress,
    compute_success_rate,
    completed_today,
    consistency_label,
    milestone_progress,
    today_progress,
)
from .milestones import current_milestone, partition
from .models import Habit, HabitWithLogs, LogEntry, Milestone, MilestoneStatus

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    active: List[HabitWithLogs] = field(default_factory=list)
    archived: List[HabitWithLogs] = field(default_factory=list)
    logs_by_habit: Dict[int, List[LogEntry]] = field(default_factory=dict)
    milestones: Dict[MilestoneStatus, List[Milestone]] = field(default_factory=dict)
    current_milestone: Optional[Milestone] = None
    success_rates: Dict[int, int] = field(default_factory=dict)
    milestone_progress: Dict[int, MilestoneProgress] = field(default_factory=dict)
    completed_today: int = 0
    today_progress: int = 0
    consistency: str = "Ready"
    celebration_ready: bool = False

    @property
    def active_count(self) -> int:
        return len(self.active)

    @property
    def all_habits(self) -> List[Habit]:
        return [i.habit for i in self.active + self.archived]

    @property
    def all_logs(self) -> List[LogEntry]:
        return [e for entries in self.logs_by_habit.values() for e in entries]

    def habit(self, habit_id: int) -> Optional[HabitWithLogs]:
        for item in self.active + self.archived:
            if item.habit.id == habit_id:
                return item
        return None


def _newest_first(habits: Sequence[Habit]) -> List[Habit]:
    return sorted(habits, key=lambda h: (h.created_at or datetime.min, h.id), reverse=True)


def recompute_snapshot(
    habits: Sequence[Habit],
    logs: Sequence[LogEntry],
    milestones: Sequence[Milestone],
    now: datetime,
) -> Snapshot:
    today = day_key(now)
    known = {h.id for h in habits}

    logs_by_habit: Dict[int, List[LogEntry]] = {h.id: [] for h in habits}
    for entry in sorted(logs, key=lambda e: e.day):
        # entries of a habit deleted since the read are dropped
        if entry.habit_id in known:
            logs_by_habit[entry.habit_id].append(entry)

    ordered = _newest_first(habits)
    active = [HabitWithLogs(h, logs_by_habit[h.id]) for h in ordered if h.is_active]
    archived = [HabitWithLogs(h, logs_by_habit[h.id]) for h in ordered if not h.is_active]

    scope = current_milestone(milestones, today)
    scope_start = scope.start_date if scope else None
    rates = {
        h.id: compute_success_rate(h, logs_by_habit[h.id], scope_start, now) for h in habits
    }

    progress = today_progress(habits, logs, today)
    return Snapshot(
        active=active,
        archived=archived,
        logs_by_habit=logs_by_habit,
        milestones=partition(milestones, today),
        current_milestone=scope,
        success_rates=rates,
        milestone_progress={m.id: milestone_progress(m, habits, logs, now) for m in milestones},
        completed_today=completed_today(habits, logs, today),
        today_progress=progress,
        consistency=consistency_label(len(active), progress),
        celebration_ready=all_completed_today(habits, logs, today),
    )


def load_snapshot(db_path=db.DB_PATH_DEFAULT, now: Optional[datetime] = None) -> Snapshot:
    now = now or datetime.now()
    habits = db.list_habits("all", db_path=db_path)
    logs = db.list_logs(db_path=db_path)
    milestones = db.list_milestones(db_path=db_path)
    logger.debug(
        "Reloaded %d habits, %d log entries, %d milestones", len(habits), len(logs), len(milestones)
    )
    return recompute_snapshot(habits, logs, milestones, now)

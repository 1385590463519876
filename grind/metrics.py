"""
Progress arithmetic: success rates, milestone progress, today's completion,
and the frames behind the history grid and the month chart.

Everything here is pure: pass in habits, logs and the current instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional, Sequence

import pandas as pd

from .calendar_utils import day_key, daterange, inclusive_day_count, percent
from .models import Habit, HabitWithLogs, LogEntry, LogStatus, Milestone, MilestoneStatus

CONSISTENCY_ELITE_ABOVE = 80


def _count(logs: Iterable[LogEntry], status: LogStatus, start: Optional[date], end: date) -> int:
    return sum(
        1
        for entry in logs
        if entry.status == status and entry.day <= end and (start is None or entry.day >= start)
    )


def compute_success_rate(
    habit: Habit,
    logs: Sequence[LogEntry],
    scope_start: Optional[date],
    now: datetime,
) -> int:
    """
    Completed days over possible days, 0..100.

    The window runs from the later of the habit's creation day and
    scope_start (a milestone start, or None) up to today. Skipped days are
    taken out of the possible days; the denominator never drops below 1.
    """
    today = day_key(now)
    candidates = [d for d in (habit.created_day, scope_start) if d is not None]
    effective_start = max(candidates) if candidates else None

    logs = [entry for entry in logs if entry.habit_id == habit.id]
    completed = _count(logs, LogStatus.COMPLETED, effective_start, today)
    if effective_start is None:
        return percent(completed, 1)

    skipped = _count(logs, LogStatus.SKIPPED, effective_start, today)
    denominator = max(1, inclusive_day_count(effective_start, today) - skipped)
    return percent(completed, denominator)


# --- milestones --------------------------------------------------------------

@dataclass(frozen=True)
class MilestoneProgress:
    milestone_id: int
    status: MilestoneStatus
    total_days: int
    days_passed: int
    time_progress: int
    completed_sum: int
    possible_sum: int
    success_rate: int


def days_passed(milestone: Milestone, now: datetime) -> int:
    today = day_key(now)
    if today < milestone.start_date:
        return 0
    total = inclusive_day_count(milestone.start_date, milestone.end_date)
    return min(total, inclusive_day_count(milestone.start_date, min(today, milestone.end_date)))


def time_progress(milestone: Milestone, now: datetime) -> int:
    total = inclusive_day_count(milestone.start_date, milestone.end_date)
    return percent(days_passed(milestone, now), total)


def milestone_sums(
    milestone: Milestone, habits: Iterable[Habit], logs: Sequence[LogEntry], now: datetime
) -> tuple:
    """
    (completed_sum, possible_sum) across every habit that overlaps the
    milestone window up to today.
    """
    today = day_key(now)
    overlap_end = min(today, milestone.end_date)
    completed_sum = 0
    possible_sum = 0
    for habit in habits:
        created = habit.created_day
        overlap_start = max(created, milestone.start_date) if created else milestone.start_date
        if overlap_end < overlap_start:
            continue
        own = [entry for entry in logs if entry.habit_id == habit.id]
        completed_sum += _count(own, LogStatus.COMPLETED, overlap_start, overlap_end)
        skipped = _count(own, LogStatus.SKIPPED, overlap_start, overlap_end)
        possible_sum += max(0, inclusive_day_count(overlap_start, overlap_end) - skipped)
    return completed_sum, possible_sum


def milestone_success_rate(
    milestone: Milestone, habits: Iterable[Habit], logs: Sequence[LogEntry], now: datetime
) -> int:
    completed_sum, possible_sum = milestone_sums(milestone, habits, logs, now)
    return percent(completed_sum, possible_sum) if possible_sum > 0 else 0


def milestone_progress(
    milestone: Milestone, habits: Iterable[Habit], logs: Sequence[LogEntry], now: datetime
) -> MilestoneProgress:
    habits = list(habits)
    completed_sum, possible_sum = milestone_sums(milestone, habits, logs, now)
    return MilestoneProgress(
        milestone_id=milestone.id,
        status=milestone.status_on(day_key(now)),
        total_days=inclusive_day_count(milestone.start_date, milestone.end_date),
        days_passed=days_passed(milestone, now),
        time_progress=time_progress(milestone, now),
        completed_sum=completed_sum,
        possible_sum=possible_sum,
        success_rate=percent(completed_sum, possible_sum) if possible_sum > 0 else 0,
    )


# --- today -------------------------------------------------------------------

def completed_today(habits: Iterable[Habit], logs: Sequence[LogEntry], today: date) -> int:
    """
    Active habits with a completed entry for today.
    """
    done_ids = {e.habit_id for e in logs if e.day == today and e.status == LogStatus.COMPLETED}
    return sum(1 for h in habits if h.is_active and h.id in done_ids)


def today_progress(habits: Iterable[Habit], logs: Sequence[LogEntry], today: date) -> int:
    habits = list(habits)
    active = sum(1 for h in habits if h.is_active)
    return percent(completed_today(habits, logs, today), active) if active else 0


def consistency_label(active_count: int, progress: int) -> str:
    if active_count == 0:
        return "Ready"
    return "Elite" if progress > CONSISTENCY_ELITE_ABOVE else "Active"


# --- frames ------------------------------------------------------------------

def status_lookup(logs: Iterable[LogEntry]) -> Dict[date, LogStatus]:
    return {e.day: e.status for e in logs}


STATUS_SCORE = {LogStatus.COMPLETED: 1.0, LogStatus.SKIPPED: 0.5}


def heatmap_frame(item: HabitWithLogs, month_start: date, month_end: date) -> pd.DataFrame:
    """
    Build a dataframe for the calendar-like history grid of one month.

    Columns:
      - day (date)
      - day_num (int, None outside the month)
      - status ('completed' / 'skipped' / None)
      - score (1.0 completed, 0.5 skipped, 0.0 unlogged, None outside the month)
      - dow (0..6)
      - week (int, week index within the month)
    """
    lookup = status_lookup(item.logs)
    rows = []
    # Align weeks to Monday for a stable calendar layout
    first_monday = month_start - timedelta(days=month_start.weekday())
    for d in daterange(first_monday, month_end):
        in_month = month_start <= d <= month_end
        status = lookup.get(d) if in_month else None
        rows.append(
            {
                "day": d,
                "day_num": d.day if in_month else None,
                "status": status.value if status else None,
                "score": STATUS_SCORE.get(status, 0.0) if in_month else None,
                "dow": d.weekday(),
                "week": (d - first_monday).days // 7,
            }
        )
    df = pd.DataFrame(rows)
    # keep None for unlogged days; newer pandas would infer a str column and store NaN
    df["status"] = pd.Series([r["status"] for r in rows], index=df.index, dtype=object)
    return df


def cell_status(value) -> Optional[str]:
    """
    Status of a heatmap cell as "completed" / "skipped", or None when unlogged.
    """
    return value if isinstance(value, str) else None


def daily_progress_frame(items: Sequence[HabitWithLogs], start: date, end: date) -> pd.DataFrame:
    """
    Per-day totals across habits for [start, end]:
      - tracked (habits that existed that day), completed, skipped
      - cumulative completed / possible and the running rate (0..100)
    """
    days = daterange(start, end)
    tracked = {d: 0 for d in days}
    completed = {d: 0 for d in days}
    skipped = {d: 0 for d in days}

    for item in items:
        created = item.habit.created_day or start
        lookup = status_lookup(item.logs)
        for d in days:
            if d < created:
                continue
            tracked[d] += 1
            status = lookup.get(d)
            if status == LogStatus.COMPLETED:
                completed[d] += 1
            elif status == LogStatus.SKIPPED:
                skipped[d] += 1

    df = pd.DataFrame(
        {
            "day": days,
            "tracked": [tracked[d] for d in days],
            "completed": [completed[d] for d in days],
            "skipped": [skipped[d] for d in days],
        }
    )
    df["possible"] = (df["tracked"] - df["skipped"]).clip(lower=0)
    df["cum_completed"] = df["completed"].cumsum()
    df["cum_possible"] = df["possible"].cumsum()
    df["rate"] = [
        percent(int(c), int(p)) for c, p in zip(df["cum_completed"], df["cum_possible"])
    ]
    return df

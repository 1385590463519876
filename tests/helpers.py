from datetime import date, datetime

from grind.models import FrequencyType, Habit, LogEntry, LogStatus, Milestone

_next_log_id = [0]


def make_habit(habit_id=1, created=datetime(2026, 3, 1, 9, 30), active=True, name="Walk"):
    return Habit(
        id=habit_id,
        name=name,
        frequency_type=FrequencyType.DAILY,
        created_at=created,
        is_active=active,
    )


def log(habit_id, day, status=LogStatus.COMPLETED):
    _next_log_id[0] += 1
    return LogEntry(id=_next_log_id[0], habit_id=habit_id, day=day, status=LogStatus(status))


def march(day, hour=12):
    return datetime(2026, 3, day, hour, 0)


def milestone(start, end, milestone_id=1, title="Block"):
    return Milestone(id=milestone_id, title=title, start_date=start, end_date=end)


def d(day, month=3):
    return date(2026, month, day)

"""
Day-status state machine.

Two policies act on a (habit, day) log entry:

- explicit set, used by the "today" buttons: pressing the status that is
  already logged clears it, pressing the other one switches to it;
- cyclic advance, used by the history grid: unlogged -> completed ->
  skipped -> unlogged.

The transition tables are plain functions; set_status/advance_status run
them inside one storage transaction so a (habit, day) pair never ends up
with two entries.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from . import db
from .errors import ValidationError
from .models import LogEntry, LogStatus

logger = logging.getLogger(__name__)

CYCLE = {
    None: LogStatus.COMPLETED,
    LogStatus.COMPLETED: LogStatus.SKIPPED,
    LogStatus.SKIPPED: None,
}


def explicit_transition(current: Optional[LogStatus], requested: LogStatus) -> Optional[LogStatus]:
    if current == requested:
        return None
    return requested


def cyclic_transition(current: Optional[LogStatus]) -> Optional[LogStatus]:
    return CYCLE[current]


def set_status(habit_id: int, day: date, requested, db_path=db.DB_PATH_DEFAULT) -> Optional[LogEntry]:
    try:
        requested = LogStatus(requested)
    except ValueError as exc:
        raise ValidationError(f"Unknown status {requested!r}.") from exc
    entry = db.apply_log_transition(
        habit_id, day, lambda current: explicit_transition(current, requested), db_path=db_path
    )
    logger.info(
        "set_status habit=%s day=%s requested=%s -> %s",
        habit_id, day, requested.value, entry.status.value if entry else "unlogged",
    )
    return entry


def advance_status(habit_id: int, day: date, db_path=db.DB_PATH_DEFAULT) -> Optional[LogEntry]:
    entry = db.apply_log_transition(habit_id, day, cyclic_transition, db_path=db_path)
    logger.info(
        "advance_status habit=%s day=%s -> %s",
        habit_id, day, entry.status.value if entry else "unlogged",
    )
    return entry

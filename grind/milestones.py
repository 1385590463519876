"""
Milestones ("blocks"): date-bounded windows used to scope progress.

Whether a milestone is current, upcoming or archived is derived from today's
date every time it is read; nothing about it is stored.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from . import db
from .calendar_utils import parse_day
from .errors import NotFoundError, ValidationError
from .models import Milestone, MilestoneStatus

logger = logging.getLogger(__name__)


def _as_day(value, label: str) -> date:
    if value is None or value == "":
        raise ValidationError(f"Please pick a {label}.")
    if isinstance(value, date):
        return value
    return parse_day(str(value))


def _validate(title: str, start_date: date, end_date: date) -> None:
    if not (title or "").strip():
        raise ValidationError("Please enter a milestone title.")
    if end_date < start_date:
        raise ValidationError("The end date must be on or after the start date.")


def create(title: str, start_date, end_date, db_path=db.DB_PATH_DEFAULT) -> Milestone:
    start = _as_day(start_date, "start date")
    end = _as_day(end_date, "end date")
    _validate(title, start, end)
    milestone = db.create_milestone(title, start, end, db_path=db_path)
    logger.info("Created milestone %s (%r, %s..%s)", milestone.id, milestone.title, start, end)
    return milestone


def update(milestone_id: int, db_path=db.DB_PATH_DEFAULT, **fields) -> Milestone:
    unknown = set(fields) - {"title", "start_date", "end_date"}
    if unknown:
        raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")
    existing = db.get_milestone(milestone_id, db_path=db_path)
    if existing is None:
        raise NotFoundError("milestone", milestone_id)

    title = fields.get("title", existing.title)
    start = _as_day(fields["start_date"], "start date") if "start_date" in fields else existing.start_date
    end = _as_day(fields["end_date"], "end date") if "end_date" in fields else existing.end_date
    _validate(title, start, end)

    milestone = db.update_milestone(
        milestone_id,
        {"title": title.strip(), "start_date": start, "end_date": end},
        db_path=db_path,
    )
    logger.info("Updated milestone %s", milestone_id)
    return milestone


def remove(milestone_id: int, db_path=db.DB_PATH_DEFAULT) -> None:
    db.delete_milestone(milestone_id, db_path=db_path)
    logger.info("Deleted milestone %s", milestone_id)


def classify(milestone: Milestone, today: date) -> MilestoneStatus:
    return milestone.status_on(today)


def partition(milestones: Iterable[Milestone], today: date) -> Dict[MilestoneStatus, List[Milestone]]:
    """
    Group milestones by status. Each group keeps the input order.
    """
    groups: Dict[MilestoneStatus, List[Milestone]] = {s: [] for s in MilestoneStatus}
    for m in milestones:
        groups[m.status_on(today)].append(m)
    return groups


def current_milestone(milestones: Iterable[Milestone], today: date) -> Optional[Milestone]:
    """
    The milestone scoping today's view: among those containing today, the one
    that started last (higher id on a tie).
    """
    current = [m for m in milestones if m.status_on(today) is MilestoneStatus.CURRENT]
    if not current:
        return None
    return max(current, key=lambda m: (m.start_date, m.id))

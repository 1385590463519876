"""
Habit registry: create, edit, archive and delete habit definitions.

The recurrence rule is validated and stored but never used to gate logging.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from . import db
from .errors import ValidationError
from .models import FrequencyType, Habit

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter a habit name.")
    return name


def _frequency_type(value) -> FrequencyType:
    try:
        return FrequencyType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown frequency type {value!r}.") from exc


def _frequency_value(value) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("Times per week must be a number from 1 to 7.")
    try:
        n = int(str(value).strip())
    except ValueError as exc:
        raise ValidationError("Times per week must be a number from 1 to 7.") from exc
    if not 1 <= n <= 7:
        raise ValidationError("Times per week must be a number from 1 to 7.")
    return n


def _frequency_days(days: Optional[Iterable[int]]) -> frozenset:
    out = set()
    for d in days or ():
        try:
            d = int(d)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Weekday {d!r} is not a number.") from exc
        if not 0 <= d <= 6:
            raise ValidationError(f"Weekday index {d} is outside 0..6 (Mon..Sun).")
        out.add(d)
    return frozenset(out)


def _target_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Target date {value!r} is not a valid date.") from exc


def _validated_frequency(frequency_type, frequency_value, frequency_days) -> Dict:
    ftype = _frequency_type(frequency_type)
    value = _frequency_value(frequency_value)
    if ftype is FrequencyType.WEEKLY and value is None:
        value = 1
    return {
        "frequency_type": ftype,
        "frequency_value": value,
        "frequency_days": _frequency_days(frequency_days),
    }


def create(
    name: str,
    frequency_type=FrequencyType.DAILY,
    frequency_value=None,
    frequency_days: Optional[Iterable[int]] = None,
    target_date=None,
    description: str = "",
    db_path=db.DB_PATH_DEFAULT,
) -> Habit:
    clean = _clean_name(name)
    freq = _validated_frequency(frequency_type, frequency_value, frequency_days)
    habit = db.create_habit(
        name=clean,
        frequency_type=freq["frequency_type"],
        frequency_value=freq["frequency_value"],
        frequency_days=freq["frequency_days"],
        target_date=_target_date(target_date),
        description=description,
        db_path=db_path,
    )
    logger.info("Created habit %s (%r)", habit.id, habit.name)
    return habit


def update(habit_id: int, db_path=db.DB_PATH_DEFAULT, **fields) -> Habit:
    """
    Partial update of name, description, frequency fields and target date.
    """
    allowed = {"name", "description", "frequency_type", "frequency_value", "frequency_days", "target_date"}
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")

    clean: Dict = {}
    if "name" in fields:
        clean["name"] = _clean_name(fields["name"])
    if "description" in fields:
        clean["description"] = (fields["description"] or "").strip()
    if "frequency_type" in fields:
        clean["frequency_type"] = _frequency_type(fields["frequency_type"])
    if "frequency_value" in fields:
        clean["frequency_value"] = _frequency_value(fields["frequency_value"])
    if "frequency_days" in fields:
        clean["frequency_days"] = _frequency_days(fields["frequency_days"])
    if "target_date" in fields:
        clean["target_date"] = _target_date(fields["target_date"])
    if clean.get("frequency_type") is FrequencyType.WEEKLY and clean.get("frequency_value", 1) is None:
        clean["frequency_value"] = 1

    habit = db.update_habit(habit_id, clean, db_path=db_path)
    logger.info("Updated habit %s: %s", habit_id, ", ".join(sorted(clean)) or "no changes")
    return habit


def archive(habit_id: int, db_path=db.DB_PATH_DEFAULT) -> Habit:
    habit = db.update_habit(habit_id, {"is_active": False}, db_path=db_path)
    logger.info("Archived habit %s", habit_id)
    return habit


def reactivate(habit_id: int, db_path=db.DB_PATH_DEFAULT) -> Habit:
    habit = db.update_habit(habit_id, {"is_active": True}, db_path=db_path)
    logger.info("Reactivated habit %s", habit_id)
    return habit


def remove(habit_id: int, db_path=db.DB_PATH_DEFAULT) -> None:
    db.delete_habit(habit_id, db_path=db_path)
    logger.info("Deleted habit %s with its log history", habit_id)


def list_active(db_path=db.DB_PATH_DEFAULT) -> List[Habit]:
    return db.list_habits("active", db_path=db_path)


def list_archived(db_path=db.DB_PATH_DEFAULT) -> List[Habit]:
    return db.list_habits("archived", db_path=db_path)

"""
One-shot celebration when every active habit is completed for today.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from .calendar_utils import day_key
from .metrics import completed_today
from .models import Habit, LogEntry

logger = logging.getLogger(__name__)

CELEBRATION_SECONDS = 5.0


def all_completed_today(habits: Iterable[Habit], logs: Sequence[LogEntry], today: date) -> bool:
    habits = list(habits)
    active_count = sum(1 for h in habits if h.is_active)
    return active_count > 0 and completed_today(habits, logs, today) == active_count


class CelebrationTrigger:
    """
    Holds the auto-dismiss deadline of the celebration banner.

    Firing again while a celebration is showing moves the deadline out;
    it does not queue a second one.
    """

    def __init__(self, duration_seconds: float = CELEBRATION_SECONDS) -> None:
        self.duration = timedelta(seconds=duration_seconds)
        self.active_until: Optional[datetime] = None

    def fire(self, now: datetime) -> None:
        if self.is_active(now):
            logger.debug("Celebration already showing, restarting the timer")
        self.active_until = now + self.duration

    def observe(self, habits: Iterable[Habit], logs: Sequence[LogEntry], now: datetime) -> bool:
        if all_completed_today(habits, logs, day_key(now)):
            self.fire(now)
            logger.info("All active habits completed for %s", day_key(now))
            return True
        return False

    def is_active(self, now: datetime) -> bool:
        return self.active_until is not None and now < self.active_until

    def dismiss(self) -> None:
        self.active_until = None

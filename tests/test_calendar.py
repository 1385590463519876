import unittest
from datetime import date, datetime, timedelta, timezone

from grind.calendar_utils import (
    day_key,
    daterange,
    inclusive_day_count,
    month_bounds,
    parse_day,
    percent,
    safe_day_key,
)
from grind.errors import ValidationError


class DayKeyTests(unittest.TestCase):
    def test_naive_datetime_keeps_its_date(self):
        self.assertEqual(day_key(datetime(2026, 3, 5, 23, 59)), date(2026, 3, 5))
        self.assertEqual(day_key(datetime(2026, 3, 5, 0, 0)), date(2026, 3, 5))

    def test_date_passes_through(self):
        self.assertEqual(day_key(date(2026, 1, 31)), date(2026, 1, 31))

    def test_iso_string(self):
        self.assertEqual(day_key("2026-03-05T08:15:00"), date(2026, 3, 5))

    def test_aware_datetime_uses_local_day(self):
        instant = datetime(2026, 3, 5, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(day_key(instant), instant.astimezone().date())

    def test_safe_day_key_degrades_to_none(self):
        self.assertIsNone(safe_day_key(None))
        self.assertIsNone(safe_day_key(""))
        self.assertIsNone(safe_day_key("not a date"))
        self.assertIsNone(safe_day_key(42))


class DayCountTests(unittest.TestCase):
    def test_same_day_counts_once(self):
        self.assertEqual(inclusive_day_count(date(2026, 3, 1), date(2026, 3, 1)), 1)

    def test_both_ends_counted(self):
        self.assertEqual(inclusive_day_count(date(2026, 3, 1), date(2026, 3, 10)), 10)

    def test_across_month_end(self):
        self.assertEqual(inclusive_day_count(date(2026, 2, 27), date(2026, 3, 2)), 4)

    def test_daterange_matches_count(self):
        start, end = date(2026, 3, 1), date(2026, 3, 10)
        days = daterange(start, end)
        self.assertEqual(len(days), inclusive_day_count(start, end))
        self.assertEqual(days[0], start)
        self.assertEqual(days[-1], end)
        self.assertEqual(daterange(end, start), [])

    def test_month_bounds(self):
        self.assertEqual(month_bounds(date(2026, 2, 14)), (date(2026, 2, 1), date(2026, 2, 28)))
        self.assertEqual(month_bounds(date(2026, 12, 31)), (date(2026, 12, 1), date(2026, 12, 31)))

    def test_parse_day(self):
        self.assertEqual(parse_day(" 2026-03-05 "), date(2026, 3, 5))
        with self.assertRaises(ValidationError):
            parse_day("05/03/2026")


class PercentTests(unittest.TestCase):
    def test_rounds_half_up(self):
        self.assertEqual(percent(1, 8), 13)  # 12.5
        self.assertEqual(percent(5, 8), 63)  # 62.5
        self.assertEqual(percent(3, 9), 33)
        self.assertEqual(percent(2, 3), 67)

    def test_clamped(self):
        self.assertEqual(percent(5, 1), 100)
        self.assertEqual(percent(0, 7), 0)
        self.assertEqual(percent(3, 0), 0)


if __name__ == "__main__":
    unittest.main()

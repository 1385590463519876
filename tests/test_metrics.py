import unittest
from datetime import date, datetime, timedelta

from grind.metrics import (
    cell_status,
    compute_success_rate,
    consistency_label,
    daily_progress_frame,
    days_passed,
    heatmap_frame,
    milestone_progress,
    milestone_success_rate,
    milestone_sums,
    time_progress,
    today_progress,
)
from grind.models import Habit, HabitWithLogs, LogStatus, MilestoneStatus

from .helpers import d, log, make_habit, march, milestone

C = LogStatus.COMPLETED
S = LogStatus.SKIPPED


class SuccessRateTests(unittest.TestCase):
    def test_no_logs_is_zero(self):
        habit = make_habit()
        for day in (1, 2, 15, 31):
            self.assertEqual(compute_success_rate(habit, [], None, march(day)), 0)

    def test_ten_day_window_with_one_skip(self):
        habit = make_habit(created=datetime(2026, 3, 1, 21, 0))
        logs = [log(1, d(2)), log(1, d(5)), log(1, d(9)), log(1, d(7), S)]
        # 10 days, 1 skipped -> 3 / 9
        self.assertEqual(compute_success_rate(habit, logs, None, march(10)), 33)

    def test_every_day_completed(self):
        habit = make_habit()
        logs = [log(1, d(n)) for n in range(1, 6)]
        self.assertEqual(compute_success_rate(habit, logs, None, march(5)), 100)

    def test_created_today_and_completed(self):
        habit = make_habit(created=datetime(2026, 3, 5, 7, 0))
        self.assertEqual(compute_success_rate(habit, [log(1, d(5))], None, march(5, 23)), 100)

    def test_all_skipped_keeps_denominator_at_one(self):
        habit = make_habit()
        logs = [log(1, d(n), S) for n in range(1, 4)]
        self.assertEqual(compute_success_rate(habit, logs, None, march(3)), 0)

    def test_logs_outside_window_ignored(self):
        habit = make_habit(created=datetime(2026, 3, 3, 8, 0))
        logs = [
            log(1, d(1)),          # before creation
            log(1, d(2)),          # before creation
            log(1, d(3)),
            log(1, d(4)),
            log(1, d(9)),          # after today
        ]
        # window 3..6 = 4 days, 2 completed
        self.assertEqual(compute_success_rate(habit, logs, None, march(6)), 50)

    def test_other_habits_logs_ignored(self):
        habit = make_habit(habit_id=1)
        logs = [log(2, d(n)) for n in range(1, 5)]
        self.assertEqual(compute_success_rate(habit, logs, None, march(4)), 0)

    def test_milestone_scope_moves_start(self):
        habit = make_habit(created=datetime(2026, 3, 1, 8, 0))
        logs = [log(1, d(n)) for n in (1, 2, 3, 4, 11, 12)]
        # unscoped: 6 of 12
        self.assertEqual(compute_success_rate(habit, logs, None, march(12)), 50)
        # scoped from the 11th: 2 of 2
        self.assertEqual(compute_success_rate(habit, logs, d(11), march(12)), 100)

    def test_scope_before_creation_uses_creation(self):
        habit = make_habit(created=datetime(2026, 3, 8, 8, 0))
        logs = [log(1, d(8)), log(1, d(9))]
        self.assertEqual(
            compute_success_rate(habit, logs, d(1), march(11)),
            compute_success_rate(habit, logs, None, march(11)),
        )
        self.assertEqual(compute_success_rate(habit, logs, d(1), march(11)), 50)

    def test_missing_created_at_falls_back(self):
        habit = Habit(id=1, name="Old", created_at=None)
        self.assertEqual(compute_success_rate(habit, [], None, march(5)), 0)
        self.assertEqual(compute_success_rate(habit, [log(1, d(2))], None, march(5)), 100)

    def test_missing_created_at_with_scope(self):
        habit = Habit(id=1, name="Old", created_at=None)
        logs = [log(1, d(3)), log(1, d(4))]
        self.assertEqual(compute_success_rate(habit, logs, d(3), march(6)), 50)

    def test_bounded(self):
        habit = make_habit(created=datetime(2026, 3, 5, 8, 0))
        # more completions than days can only come from odd data; still capped
        logs = [log(1, d(5)), log(1, d(5))]
        self.assertEqual(compute_success_rate(habit, logs, None, march(5)), 100)


class MilestoneTimeTests(unittest.TestCase):
    def setUp(self):
        self.m = milestone(d(1), d(10))

    def test_halfway(self):
        self.assertEqual(days_passed(self.m, march(5)), 5)
        self.assertEqual(time_progress(self.m, march(5)), 50)

    def test_before_start(self):
        self.assertEqual(days_passed(self.m, datetime(2026, 2, 20, 9, 0)), 0)
        self.assertEqual(time_progress(self.m, datetime(2026, 2, 28, 23, 0)), 0)

    def test_first_and_last_day(self):
        self.assertEqual(time_progress(self.m, march(1, 0)), 10)
        self.assertEqual(time_progress(self.m, march(10, 23)), 100)

    def test_after_end_pinned(self):
        self.assertEqual(days_passed(self.m, march(25)), 10)
        self.assertEqual(time_progress(self.m, march(25)), 100)

    def test_monotonic_and_bounded(self):
        previous = -1
        start = datetime(2026, 2, 20, 6, 0)
        for hours in range(0, 24 * 30, 7):
            value = time_progress(self.m, start + timedelta(hours=hours))
            self.assertGreaterEqual(value, previous)
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, 100)
            previous = value

    def test_single_day_milestone(self):
        m = milestone(d(4), d(4))
        self.assertEqual(time_progress(m, march(3)), 0)
        self.assertEqual(time_progress(m, march(4)), 100)


class MilestoneSuccessTests(unittest.TestCase):
    def test_two_habits_combined(self):
        m = milestone(d(1), d(20))
        # habit 1: created day 1, today is day 10 -> 10 days, 2 skipped => possible 8, 4 done
        h1 = make_habit(1, created=datetime(2026, 3, 1, 8, 0))
        logs = [log(1, d(n)) for n in (1, 2, 3, 4)] + [log(1, d(5), S), log(1, d(6), S)]
        # habit 2: created day 9 -> 2 days, both done
        h2 = make_habit(2, created=datetime(2026, 3, 9, 8, 0))
        logs += [log(2, d(9)), log(2, d(10))]

        self.assertEqual(milestone_sums(m, [h1], logs, march(10)), (4, 8))
        self.assertEqual(milestone_sums(m, [h2], logs, march(10)), (2, 2))
        self.assertEqual(milestone_sums(m, [h1, h2], logs, march(10)), (6, 10))
        self.assertEqual(milestone_success_rate(m, [h1, h2], logs, march(10)), 60)

    def test_habit_created_after_window_contributes_nothing(self):
        m = milestone(d(1), d(5))
        h = make_habit(created=datetime(2026, 3, 8, 8, 0))
        self.assertEqual(milestone_sums(m, [h], [log(1, d(8))], march(10)), (0, 0))
        self.assertEqual(milestone_success_rate(m, [h], [], march(10)), 0)

    def test_upcoming_milestone_is_zero(self):
        m = milestone(d(20), d(30))
        h = make_habit()
        self.assertEqual(milestone_success_rate(m, [h], [log(1, d(2))], march(10)), 0)

    def test_logs_outside_window_ignored(self):
        m = milestone(d(5), d(6))
        h = make_habit()
        logs = [log(1, d(4)), log(1, d(5)), log(1, d(7))]
        self.assertEqual(milestone_sums(m, [h], logs, march(20)), (1, 2))

    def test_archived_habits_count(self):
        m = milestone(d(1), d(2))
        h = make_habit(active=False)
        self.assertEqual(milestone_sums(m, [h], [log(1, d(1)), log(1, d(2))], march(3)), (2, 2))

    def test_progress_record(self):
        m = milestone(d(1), d(10), milestone_id=7)
        h = make_habit()
        p = milestone_progress(m, [h], [log(1, d(1)), log(1, d(2))], march(4))
        self.assertEqual(p.milestone_id, 7)
        self.assertEqual(p.status, MilestoneStatus.CURRENT)
        self.assertEqual(p.total_days, 10)
        self.assertEqual(p.days_passed, 4)
        self.assertEqual(p.time_progress, 40)
        self.assertEqual((p.completed_sum, p.possible_sum), (2, 4))
        self.assertEqual(p.success_rate, 50)


class TodayTests(unittest.TestCase):
    def test_today_progress_counts_active_only(self):
        habits = [make_habit(1), make_habit(2), make_habit(3, active=False)]
        logs = [log(1, d(5)), log(3, d(5)), log(2, d(4))]
        self.assertEqual(today_progress(habits, logs, d(5)), 50)

    def test_skipped_is_not_completed(self):
        habits = [make_habit(1)]
        self.assertEqual(today_progress(habits, [log(1, d(5), S)], d(5)), 0)

    def test_no_active_habits(self):
        self.assertEqual(today_progress([], [], d(5)), 0)

    def test_consistency_label(self):
        self.assertEqual(consistency_label(0, 0), "Ready")
        self.assertEqual(consistency_label(3, 80), "Active")
        self.assertEqual(consistency_label(3, 81), "Elite")


class FrameTests(unittest.TestCase):
    def test_heatmap_frame_marks_statuses(self):
        item = HabitWithLogs(make_habit(), [log(1, d(2)), log(1, d(3), S)])
        df = heatmap_frame(item, d(1), d(31))
        in_month = df[df["day_num"].notna()]
        self.assertEqual(len(in_month), 31)
        by_day = {row.day: row for row in in_month.itertuples()}
        self.assertEqual(by_day[d(2)].status, "completed")
        self.assertEqual(by_day[d(2)].score, 1.0)
        self.assertEqual(by_day[d(3)].status, "skipped")
        self.assertEqual(by_day[d(3)].score, 0.5)
        self.assertIsNone(by_day[d(4)].status)
        self.assertIsNone(cell_status(by_day[d(4)].status))
        self.assertEqual(by_day[d(4)].score, 0.0)
        # March 2026 starts on a Sunday, so the grid opens on Monday Feb 23
        self.assertEqual(df["day"].iloc[0], date(2026, 2, 23))
        self.assertEqual(set(df["dow"]), set(range(7)))

    def test_cell_status_for_grid_labels(self):
        df = heatmap_frame(HabitWithLogs(make_habit(), [log(1, d(2))]), d(1), d(31))
        labels = {row.day: cell_status(row.status) for row in df.itertuples()}
        self.assertEqual(labels[d(2)], "completed")
        self.assertIsNone(labels[d(4)])
        # padding days outside the month are unlogged too
        self.assertIsNone(labels[date(2026, 2, 23)])
        self.assertIsNone(cell_status(float("nan")))
        self.assertIsNone(cell_status(None))

    def test_daily_progress_frame(self):
        items = [
            HabitWithLogs(make_habit(1), [log(1, d(1)), log(1, d(2), S), log(1, d(3))]),
            HabitWithLogs(make_habit(2, created=datetime(2026, 3, 3, 8, 0)), [log(2, d(3))]),
        ]
        df = daily_progress_frame(items, d(1), d(3))
        self.assertEqual(list(df["tracked"]), [1, 1, 2])
        self.assertEqual(list(df["completed"]), [1, 0, 2])
        self.assertEqual(list(df["possible"]), [1, 0, 2])
        self.assertEqual(list(df["cum_completed"]), [1, 1, 3])
        self.assertEqual(list(df["cum_possible"]), [1, 1, 3])
        self.assertEqual(list(df["rate"]), [100, 100, 100])


if __name__ == "__main__":
    unittest.main()

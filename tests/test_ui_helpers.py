from datetime import date, timedelta
from unittest import mock

from grind import registry
from grind.config import AppConfig
from grind.models import LogStatus
from grind.status import set_status
from grind.ui_helpers import celebration, refresh_celebration, render_celebration

from .dbcase import DatabaseTestCase


class CelebrationWiringTests(DatabaseTestCase):
    """Status changes made from any page reach the shared celebration banner."""

    def setUp(self):
        super().setUp()
        patcher = mock.patch("grind.ui_helpers.st")
        self.st = patcher.start()
        self.addCleanup(patcher.stop)
        self.st.session_state = {}
        self.config = AppConfig(db_path=self.db_path)
        self.habit = registry.create("Read", db_path=self.db_path)

    def test_completing_today_fires_and_renders(self):
        today = date.today()
        set_status(self.habit.id, today, LogStatus.COMPLETED, db_path=self.db_path)
        refresh_celebration(self.config, today)
        self.assertIn("celebration", self.st.session_state)
        self.assertTrue(render_celebration(self.config))
        self.st.balloons.assert_called_once()
        self.st.success.assert_called_once()

    def test_other_day_does_not_fire(self):
        yesterday = date.today() - timedelta(days=1)
        set_status(self.habit.id, yesterday, LogStatus.COMPLETED, db_path=self.db_path)
        refresh_celebration(self.config, yesterday)
        self.assertFalse(render_celebration(self.config))
        self.st.balloons.assert_not_called()

    def test_incomplete_day_does_not_fire(self):
        registry.create("Walk", db_path=self.db_path)
        today = date.today()
        set_status(self.habit.id, today, LogStatus.COMPLETED, db_path=self.db_path)
        refresh_celebration(self.config, today)
        self.assertFalse(render_celebration(self.config))
        self.st.balloons.assert_not_called()

    def test_trigger_lives_in_session_state(self):
        self.assertIs(celebration(self.config), celebration(self.config))
        self.assertEqual(celebration(self.config).duration, timedelta(seconds=self.config.celebration_seconds))

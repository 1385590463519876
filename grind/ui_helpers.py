"""
UI helpers shared across pages (Streamlit).

Keeping this separate avoids repeating small formatting bits.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime

import streamlit as st

from .celebration import CelebrationTrigger
from .config import AppConfig
from .db import init_db
from .errors import NotFoundError, PersistenceError, ValidationError
from .logging_setup import setup_logging
from .snapshot import Snapshot, load_snapshot

logger = logging.getLogger(__name__)


@st.cache_resource
def bootstrap() -> AppConfig:
    """
    Load config, set up logging and create tables once per server process.
    """
    config = AppConfig.from_env()
    setup_logging(config)
    init_db(config.db_path)
    logger.info("Using database %s", config.db_path)
    return config


def app_header(title: str, subtitle: str | None = None) -> None:
    st.title(title)
    if subtitle:
        st.caption(subtitle)


def toast_success(msg: str) -> None:
    try:
        st.toast(msg, icon="✅")
    except Exception:
        st.success(msg)


def toast_error(msg: str) -> None:
    try:
        st.toast(msg, icon="⚠️")
    except Exception:
        st.error(msg)


def celebration(config: AppConfig) -> CelebrationTrigger:
    if "celebration" not in st.session_state:
        st.session_state["celebration"] = CelebrationTrigger(config.celebration_seconds)
    return st.session_state["celebration"]


@contextmanager
def user_action(label: str):
    """
    Run a mutation from a page. Bad input becomes a toast and a vanished
    id triggers a rerun; a storage failure stops the page with an error.
    """
    try:
        yield
    except ValidationError as e:
        toast_error(str(e))
    except NotFoundError as e:
        logger.warning("%s: dropping stale reference (%s)", label, e)
        st.rerun()
    except PersistenceError as e:
        st.error(f"Could not {label}: {e}")
        st.stop()


def refresh_celebration(config: AppConfig, day: date) -> None:
    """
    After a status change on `day`, reload and fire the celebration if
    that was today and every active habit is now completed.
    """
    now = datetime.now()
    if day != now.date():
        return
    fresh = load_snapshot(config.db_path, now)
    celebration(config).observe(fresh.all_habits, fresh.all_logs, now)


def load_or_stop(config: AppConfig, now: datetime) -> Snapshot:
    try:
        return load_snapshot(config.db_path, now)
    except PersistenceError as e:
        st.error(f"Could not load your data: {e}")
        st.stop()


def render_celebration(config: AppConfig) -> bool:
    """
    Show the all-done banner while the celebration window is open.
    """
    if not celebration(config).is_active(datetime.now()):
        return False
    st.balloons()
    st.success("Every habit done for today. Keep the streak going!")
    return True

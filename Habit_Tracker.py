"""
GRIND - Dashboard

Run with:
    streamlit run Habit_Tracker.py
"""

from __future__ import annotations

from datetime import datetime

import altair as alt
import pandas as pd
import streamlit as st

from grind import status
from grind.calendar_utils import month_bounds
from grind.metrics import daily_progress_frame
from grind.models import LogStatus
from grind.snapshot import Snapshot
from grind.ui_helpers import (
    app_header,
    bootstrap,
    load_or_stop,
    refresh_celebration,
    render_celebration,
    toast_success,
    user_action,
)


st.set_page_config(
    page_title="GRIND",
    page_icon="🔥",
    layout="wide",
)

config = bootstrap()


def render_month_progress(df: pd.DataFrame) -> None:
    chart_df = df.copy()
    chart_df["day"] = pd.to_datetime(chart_df["day"])

    base = alt.Chart(chart_df).encode(
        x=alt.X("day:T", title="Date")
    )

    done_line = base.mark_line().encode(
        y=alt.Y("cum_completed:Q", title="Cumulative completions"),
        tooltip=["day:T", "completed:Q", "skipped:Q", "cum_completed:Q", "cum_possible:Q", "rate:Q"],
    )

    possible_line = base.mark_line(strokeDash=[4, 4]).encode(
        y=alt.Y("cum_possible:Q"),
        tooltip=["day:T", "possible:Q", "cum_possible:Q"],
    )

    st.altair_chart((possible_line + done_line).interactive(), use_container_width=True)


def render_header(snap: Snapshot) -> None:
    c1, c2, c3 = st.columns(3)
    c1.metric("Target met", f"{snap.today_progress}%")
    c2.metric("Today", f"{snap.completed_today} / {snap.active_count}")
    c3.metric("Consistency", snap.consistency)
    st.progress(snap.today_progress / 100)

    if snap.current_milestone:
        m = snap.current_milestone
        p = snap.milestone_progress[m.id]
        st.caption(
            f"Block **{m.title}**: day {p.days_passed} of {p.total_days} "
            f"({p.time_progress}% elapsed, {p.success_rate}% success)"
        )


def render_today(snap: Snapshot, now: datetime) -> None:
    st.subheader("Today")

    if not snap.active:
        st.info("No habits yet. Create one in **Habits**.")
        return

    today = now.date()

    for item in snap.active:
        h = item.habit
        entry = item.log_on(today)
        current = entry.status if entry else None

        left, mid, right = st.columns([0.6, 0.2, 0.2])
        with left:
            label = f"~~{h.name}~~" if current is LogStatus.COMPLETED else f"**{h.name}**"
            st.write(label)
            st.caption(f"{h.frequency_label()} | success: {snap.success_rates.get(h.id, 0)}%")
            if h.target_date:
                st.caption(f"Target: {h.target_date.isoformat()}")
        for col, requested, text in (
            (mid, LogStatus.COMPLETED, "Done"),
            (right, LogStatus.SKIPPED, "Skip"),
        ):
            with col:
                pressed = current is requested
                if st.button(
                    f"{text} ✅" if pressed else text,
                    key=f"{requested.value}_{h.id}",
                    type="primary" if pressed else "secondary",
                ):
                    with user_action("save today's status"):
                        status.set_status(h.id, today, requested, db_path=config.db_path)
                        refresh_celebration(config, today)
                        toast_success("Saved")
                        st.rerun()


def main() -> None:
    app_header("GRIND", now_label())

    now = datetime.now()
    snap = load_or_stop(config, now)

    render_header(snap)

    st.divider()
    render_today(snap, now)
    render_celebration(config)

    st.divider()
    st.subheader("This month")
    if snap.active or snap.archived:
        month_start, _ = month_bounds(now.date())
        df = daily_progress_frame(snap.active + snap.archived, month_start, now.date())
        total_done = int(df["completed"].sum())
        total_possible = int(df["possible"].sum())

        c1, c2, c3 = st.columns(3)
        c1.metric("Completions", f"{total_done}")
        c2.metric("Possible", f"{total_possible}")
        c3.metric("Completion rate", f"{int(df['rate'].iloc[-1])}%")

        render_month_progress(df)
    else:
        st.info("Create a habit first to see progress for the month.")


def now_label() -> str:
    return datetime.now().strftime("%A, %b %d")


if __name__ == "__main__":
    main()

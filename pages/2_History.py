"""
History page

A month grid per habit. Clicking a day cycles it:
not logged -> done -> skipped -> not logged.
"""

from __future__ import annotations

from datetime import date, datetime

import altair as alt
import pandas as pd
import streamlit as st

from grind import db, status
from grind.calendar_utils import WEEKDAY_NAMES, month_bounds
from grind.metrics import cell_status, heatmap_frame
from grind.ui_helpers import (
    app_header,
    bootstrap,
    load_or_stop,
    refresh_celebration,
    render_celebration,
    user_action,
)

st.set_page_config(page_title="History", page_icon="🗓️", layout="wide")

config = bootstrap()

CELL_LABELS = {"completed": "✅", "skipped": "➖", None: "·"}


def render_heatmap(df) -> None:
    in_month = df[df["day_num"].notna()].copy()
    in_month["status"] = in_month["status"].fillna("not logged")
    in_month["day"] = pd.to_datetime(in_month["day"])
    chart = (
        alt.Chart(in_month)
        .mark_rect(cornerRadius=3)
        .encode(
            x=alt.X("dow:O", title=None, axis=alt.Axis(labelExpr=f"{WEEKDAY_NAMES}[datum.value]")),
            y=alt.Y("week:O", title=None, axis=None),
            color=alt.Color(
                "status:N",
                scale=alt.Scale(
                    domain=["completed", "skipped", "not logged"],
                    range=["#f43f5e", "#a1a1aa", "#27272a"],
                ),
                legend=alt.Legend(orient="bottom", title=None),
            ),
            tooltip=["day:T", "status:N"],
        )
    )
    st.altair_chart(chart, use_container_width=True)


def render_grid(habit_id: int, df, today: date) -> None:
    header = st.columns(7)
    for i, nm in enumerate(WEEKDAY_NAMES):
        header[i].caption(nm)

    for _, week in df.groupby("week"):
        cols = st.columns(7)
        for _, cell in week.iterrows():
            col = cols[int(cell["dow"])]
            if pd.isna(cell["day_num"]):
                continue
            day = cell["day"]
            label = f"{int(cell['day_num'])} {CELL_LABELS[cell_status(cell['status'])]}"
            if col.button(label, key=f"cell_{habit_id}_{day.isoformat()}", disabled=day > today):
                with user_action("update the day"):
                    status.advance_status(habit_id, day, db_path=config.db_path)
                    refresh_celebration(config, day)
                    st.rerun()


def main() -> None:
    app_header("History", "Click a day to cycle it: done, skipped, not logged.")

    now = datetime.now()
    snap = load_or_stop(config, now)
    render_celebration(config)
    items = snap.active + snap.archived
    if not items:
        st.info("Create a habit first.")
        return

    names = {i.habit.id: i.habit.name + ("" if i.habit.is_active else " (archived)") for i in items}
    ids = list(names)
    last = int(db.get_setting("history_habit", "0", db_path=config.db_path) or 0)
    habit_id = st.selectbox(
        "Habit", options=ids, index=ids.index(last) if last in ids else 0, format_func=names.get
    )
    if habit_id != last:
        db.set_setting("history_habit", str(habit_id), db_path=config.db_path)

    month_pick = st.date_input("Month", value=now.date(), help="Pick any day in the month you want to review.")
    month_start, month_end = month_bounds(month_pick)

    item = snap.habit(habit_id)
    df = heatmap_frame(item, month_start, month_end)

    c1, c2 = st.columns(2)
    c1.metric("Success rate", f"{snap.success_rates.get(habit_id, 0)}%")
    if snap.current_milestone:
        c2.caption(f"Counting from the start of **{snap.current_milestone.title}**")

    st.divider()
    render_grid(habit_id, df, now.date())
    st.divider()
    render_heatmap(df)


if __name__ == "__main__":
    main()

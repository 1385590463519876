"""
Milestones page

Blocks of time (e.g. a 30-day push). The current block scopes every
success rate; each block shows how much of it has passed and how well
all habits did inside it.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import streamlit as st

from grind import milestones as milestone_service
from grind.metrics import MilestoneProgress
from grind.models import Milestone, MilestoneStatus
from grind.ui_helpers import app_header, bootstrap, load_or_stop, toast_success, user_action

st.set_page_config(page_title="Milestones", page_icon="🏁", layout="wide")

config = bootstrap()

SECTION_TITLES = {
    MilestoneStatus.CURRENT: "Current",
    MilestoneStatus.UPCOMING: "Upcoming",
    MilestoneStatus.ARCHIVED: "Archived",
}


def render_milestone(m: Milestone, p: MilestoneProgress) -> None:
    with st.container(border=True):
        top = st.columns([0.7, 0.15, 0.15])
        with top[0]:
            st.write(f"**{m.title}**")
            st.caption(f"{m.start_date.isoformat()} → {m.end_date.isoformat()} ({p.total_days} days)")
        with top[1]:
            if st.button("Edit", key=f"edit_m_{m.id}"):
                st.session_state["edit_milestone"] = m.id
                st.rerun()
        with top[2]:
            if st.button("Delete", key=f"delete_m_{m.id}"):
                with user_action("delete the milestone"):
                    milestone_service.remove(m.id, db_path=config.db_path)
                    if st.session_state.get("edit_milestone") == m.id:
                        st.session_state["edit_milestone"] = None
                    toast_success("Milestone deleted")
                    st.rerun()

        st.progress(p.time_progress / 100, text=f"Time: day {p.days_passed} of {p.total_days} ({p.time_progress}%)")
        st.progress(
            p.success_rate / 100,
            text=f"Success: {p.completed_sum} of {p.possible_sum} possible days ({p.success_rate}%)",
        )


def main() -> None:
    app_header("Milestones", "Time-boxed blocks that scope your success rates.")

    now = datetime.now()
    snap = load_or_stop(config, now)

    left, right = st.columns([1.1, 0.9], gap="large")

    with left:
        any_milestone = False
        for state in (MilestoneStatus.CURRENT, MilestoneStatus.UPCOMING, MilestoneStatus.ARCHIVED):
            group = snap.milestones.get(state, [])
            if not group:
                continue
            any_milestone = True
            st.subheader(SECTION_TITLES[state])
            for m in group:
                render_milestone(m, snap.milestone_progress[m.id])
        if not any_milestone:
            st.info("No milestones yet.")

    with right:
        edit_id = st.session_state.get("edit_milestone")
        editing = None
        for group in snap.milestones.values():
            for m in group:
                if m.id == edit_id:
                    editing = m

        st.subheader("Edit Milestone" if editing else "New Milestone")
        today = now.date()
        title = st.text_input("Title", value=editing.title if editing else "", placeholder="e.g. 30-day block")
        start = st.date_input("Start", value=editing.start_date if editing else today)
        end = st.date_input("End", value=editing.end_date if editing else today + timedelta(days=29))

        c1, c2 = st.columns(2)
        with c1:
            if st.button("Save", type="primary"):
                with user_action("save the milestone"):
                    if editing:
                        milestone_service.update(
                            editing.id, db_path=config.db_path, title=title, start_date=start, end_date=end
                        )
                        toast_success("Milestone updated")
                    else:
                        milestone_service.create(title, start, end, db_path=config.db_path)
                        toast_success("Milestone created")
                    st.session_state["edit_milestone"] = None
                    st.rerun()
        with c2:
            if editing and st.button("Cancel"):
                st.session_state["edit_milestone"] = None
                st.rerun()


if __name__ == "__main__":
    main()

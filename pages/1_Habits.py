"""
Habits page

Create, edit, archive and delete habits. The recurrence rule is only a
label:
- daily
- N times per week
- specific days (pick the weekdays)
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from grind import registry
from grind.calendar_utils import WEEKDAY_NAMES
from grind.models import FrequencyType, Habit
from grind.ui_helpers import app_header, bootstrap, load_or_stop, toast_success, user_action

st.set_page_config(page_title="Habits", page_icon="📌", layout="wide")

config = bootstrap()

FREQUENCY_LABELS = {
    FrequencyType.DAILY: "Daily",
    FrequencyType.WEEKLY: "N times per week",
    FrequencyType.SPECIFIC_DAYS: "Specific days",
}


def render_list(title: str, habits: list[Habit], rates: dict[int, int], archived: bool) -> None:
    st.subheader(title)
    if not habits:
        st.info("Nothing here yet." if archived else "No habits yet.")
        return
    for h in habits:
        cols = st.columns([0.6, 0.2, 0.2])
        with cols[0]:
            st.write(f"**{h.name}**")
            st.caption(f"{h.frequency_label()} | success: {rates.get(h.id, 0)}%")
            if h.description:
                st.caption(h.description)
        with cols[1]:
            if st.button("Edit", key=f"edit_{h.id}"):
                st.session_state["edit_id"] = h.id
                st.session_state["confirm_delete"] = False
                st.rerun()
        with cols[2]:
            if archived:
                if st.button("Reactivate", key=f"reactivate_{h.id}"):
                    with user_action("reactivate the habit"):
                        registry.reactivate(h.id, db_path=config.db_path)
                        toast_success("Habit reactivated")
                        st.rerun()
            elif st.button("Archive", key=f"archive_{h.id}"):
                with user_action("archive the habit"):
                    registry.archive(h.id, db_path=config.db_path)
                    toast_success("Habit archived")
                    st.rerun()


def main() -> None:
    app_header("Habits", "Create habits and describe how often you want to do them.")

    snap = load_or_stop(config, datetime.now())
    active = [i.habit for i in snap.active]
    archived = [i.habit for i in snap.archived]

    left, right = st.columns([0.9, 1.1], gap="large")

    with left:
        render_list("Your habits", active, snap.success_rates, archived=False)
        st.divider()
        render_list("Archived", archived, snap.success_rates, archived=True)

    with right:
        edit_id = st.session_state.get("edit_id", None)
        item = snap.habit(edit_id) if edit_id else None
        if edit_id and item is None:
            # deleted elsewhere since it was picked
            st.session_state["edit_id"] = None
        habit = item.habit if item else None

        st.subheader("Edit Habit" if habit else "New Habit")

        freq_default = habit.frequency_type if habit else FrequencyType.DAILY
        options = list(FREQUENCY_LABELS)

        name = st.text_input("Name", value=habit.name if habit else "", placeholder="Commit to something...")
        desc = st.text_area(
            "Description", value=habit.description if habit else "", height=90, placeholder="Optional"
        )
        frequency_type = st.selectbox(
            "Frequency",
            options=options,
            index=options.index(freq_default),
            format_func=lambda f: FREQUENCY_LABELS[f],
            help="Shown next to the habit. Logging is never blocked by it.",
        )

        frequency_value = habit.frequency_value if habit else None
        if frequency_type == FrequencyType.WEEKLY:
            frequency_value = st.number_input(
                "Times per week", min_value=1, max_value=7, step=1, value=frequency_value or 3
            )

        selected_days = sorted(habit.frequency_days) if habit else []
        if frequency_type == FrequencyType.SPECIFIC_DAYS:
            st.caption("Days")
            day_cols = st.columns(7)
            new_selected = []
            for i, nm in enumerate(WEEKDAY_NAMES):
                with day_cols[i]:
                    if st.checkbox(nm, value=(i in selected_days), key=f"day_{i}"):
                        new_selected.append(i)
            selected_days = new_selected

        has_target = st.checkbox("Target date", value=bool(habit and habit.target_date))
        target_date = None
        if has_target:
            target_date = st.date_input(
                "Reach by", value=(habit.target_date if habit and habit.target_date else datetime.now().date())
            )

        save_col, del_col = st.columns([0.6, 0.4])
        with save_col:
            if st.button("Save", type="primary"):
                with user_action("save the habit"):
                    if habit:
                        registry.update(
                            habit.id,
                            db_path=config.db_path,
                            name=name,
                            description=desc,
                            frequency_type=frequency_type,
                            frequency_value=frequency_value,
                            frequency_days=selected_days,
                            target_date=target_date,
                        )
                        toast_success("Habit updated")
                    else:
                        registry.create(
                            name=name,
                            frequency_type=frequency_type,
                            frequency_value=frequency_value,
                            frequency_days=selected_days,
                            target_date=target_date,
                            description=desc,
                            db_path=config.db_path,
                        )
                        toast_success("Habit created")
                    st.session_state["edit_id"] = None
                    st.rerun()
        with del_col:
            if habit:
                if st.button("Delete", help="Deletes the habit and its log history."):
                    st.session_state["confirm_delete"] = True

        if habit and st.session_state.get("confirm_delete"):
            st.warning("This will remove the habit and its history. Archive it to keep the history.")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Cancel"):
                    st.session_state["confirm_delete"] = False
                    st.rerun()
            with c2:
                if st.button("Delete permanently", type="primary"):
                    st.session_state["confirm_delete"] = False
                    st.session_state["edit_id"] = None
                    with user_action("delete the habit"):
                        registry.remove(habit.id, db_path=config.db_path)
                        toast_success("Habit deleted")
                        st.rerun()


if __name__ == "__main__":
    main()

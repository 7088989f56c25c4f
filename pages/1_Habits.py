"""
Habits page

Create and delete habits, and set or clear their daily reminder. Toggling
today's completion happens on the dashboard.
"""

from __future__ import annotations

from datetime import time

import streamlit as st

from habit_streaks import NotFoundError, ReminderTime, ValidationError
from habit_streaks.models import COLORS, DEFAULT_REMINDER, EMOJIS
from habit_streaks.ui_helpers import app_header, color_chip, get_tracker, habit_title, toast_error, toast_success

st.set_page_config(page_title="Habits", page_icon="📌", layout="wide")

tracker = get_tracker()

_DEFAULT = ReminderTime.parse(DEFAULT_REMINDER)


def to_time(reminder: ReminderTime | None) -> time:
    r = reminder or _DEFAULT
    return time(r.hour, r.minute)


def from_time(t: time) -> ReminderTime:
    return ReminderTime(t.hour, t.minute)


def render_reminder_editor(habit) -> None:
    cols = st.columns([0.5, 0.25, 0.25])
    with cols[0]:
        picked = st.time_input(
            "Reminder",
            value=to_time(habit.reminder_time),
            key=f"rt_{habit.id}",
            step=300,
        )
    with cols[1]:
        if st.button("Set", key=f"set_{habit.id}"):
            try:
                tracker.store.set_reminder(habit.id, from_time(picked))
                toast_success(f"Reminder set for {from_time(picked)}")
            except NotFoundError:
                toast_error("That habit no longer exists.")
            st.rerun()
    with cols[2]:
        if habit.reminder_time and st.button("Clear", key=f"clear_{habit.id}"):
            try:
                tracker.store.set_reminder(habit.id, None)
                toast_success("Reminder cleared")
            except NotFoundError:
                toast_error("That habit no longer exists.")
            st.rerun()


def main() -> None:
    app_header("Habits", "Create habits and choose when to be reminded.")

    store = tracker.store
    habits = store.list()

    left, right = st.columns([1.1, 0.9], gap="large")

    with left:
        st.subheader("Your habits")
        if not habits:
            st.info("No habits yet.")
        for h in habits:
            with st.container(border=True):
                top = st.columns([0.75, 0.25])
                with top[0]:
                    st.markdown(f"{color_chip(h)} {habit_title(h)}", unsafe_allow_html=True)
                    st.caption(f"Created {h.created_at:%Y-%m-%d}")
                with top[1]:
                    if st.button("Delete", key=f"delete_{h.id}"):
                        st.session_state["confirm_delete"] = h.id
                if st.session_state.get("confirm_delete") == h.id:
                    st.warning("This will remove the habit and its history.")
                    c1, c2 = st.columns(2)
                    with c1:
                        if st.button("Cancel", key=f"cancel_{h.id}"):
                            st.session_state["confirm_delete"] = None
                            st.rerun()
                    with c2:
                        if st.button("Delete permanently", type="primary", key=f"confirm_{h.id}"):
                            st.session_state["confirm_delete"] = None
                            try:
                                store.delete(h.id)
                                toast_success("Habit deleted")
                            except NotFoundError:
                                toast_error("That habit no longer exists.")
                            st.rerun()
                render_reminder_editor(h)

    with right:
        st.subheader("New Habit")

        name = st.text_input("Name", placeholder="Habit name")
        emoji = st.radio("Choose an emoji", EMOJIS, horizontal=True)
        color = st.radio(
            "Choose a color",
            COLORS,
            horizontal=True,
            format_func=lambda c: f"● {c}",
        )
        want_reminder = st.checkbox("🔔 Daily reminder (optional)", value=True)
        reminder_at = st.time_input("Reminder time", value=to_time(None), step=300, disabled=not want_reminder)

        if st.button("Add Habit", type="primary"):
            try:
                store.create(
                    name=name,
                    emoji=emoji,
                    color=color,
                    reminder_time=from_time(reminder_at) if want_reminder else None,
                )
            except ValidationError as e:
                toast_error(str(e))
            else:
                toast_success("Habit created")
                st.rerun()


if __name__ == "__main__":
    main()

"""
Habit Tracker - Dashboard

Run with:
    streamlit run Habit_Tracker.py
"""

from __future__ import annotations

from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from habit_streaks import HabitStore, NotFoundError
from habit_streaks.metrics import current_streak, streak_label, week_progress_frame
from habit_streaks.scheduling import AuthorizationStatus
from habit_streaks.ui_helpers import (
    app_header,
    color_chip,
    get_tracker,
    habit_title,
    render_week_strip,
    toast_error,
    toast_success,
)


st.set_page_config(
    page_title="Habit Tracker",
    page_icon="✅",
    layout="centered",
)

tracker = get_tracker()


def render_stats(store: HabitStore) -> None:
    c1, c2 = st.columns(2)
    c1.metric("Active Habits", len(store.list()))
    c2.metric("Completed Today", store.completed_today_count())


def render_permission_banner() -> None:
    if tracker.notification_status() is not AuthorizationStatus.UNDETERMINED:
        return
    with st.container(border=True):
        st.markdown("🔔 **Enable Reminders**")
        st.caption("Get notified to complete your habits")
        if st.button("Enable Notifications"):
            status = tracker.request_notifications().result()
            if status is AuthorizationStatus.GRANTED:
                toast_success("Reminders enabled")
            else:
                toast_error("Notifications are turned off for this app.")
            st.rerun()


def render_habit(store: HabitStore, habit, today: date) -> None:
    streak = current_streak(habit.completed_dates, today)
    completed_today = habit.is_completed_on(today)

    with st.container(border=True):
        top, right = st.columns([0.85, 0.15])
        with top:
            st.markdown(f"{color_chip(habit)} {habit_title(habit)}", unsafe_allow_html=True)
            meta = f"🔥 {streak_label(streak)}"
            if habit.reminder_time:
                meta += f" • 🔔 {habit.reminder_time}"
            st.caption(meta)
        with right:
            if st.button("🗑️", key=f"del_{habit.id}", help="Delete habit"):
                st.session_state["confirm_delete"] = habit.id

        if st.session_state.get("confirm_delete") == habit.id:
            st.warning("Are you sure you want to delete this habit?")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Cancel", key=f"cancel_{habit.id}"):
                    st.session_state["confirm_delete"] = None
                    st.rerun()
            with c2:
                if st.button("Delete permanently", type="primary", key=f"confirm_{habit.id}"):
                    st.session_state["confirm_delete"] = None
                    try:
                        store.delete(habit.id)
                        toast_success("Habit deleted")
                    except NotFoundError:
                        toast_error("That habit no longer exists.")
                    st.rerun()

        render_week_strip(habit, today)

        label = "✅ Completed Today" if completed_today else "Mark as Complete"
        kind = "primary" if completed_today else "secondary"
        if st.button(label, key=f"toggle_{habit.id}", type=kind, use_container_width=True):
            try:
                store.toggle_today(habit.id)
            except NotFoundError:
                toast_error("That habit no longer exists.")
            st.rerun()


def render_week_chart(df: pd.DataFrame) -> None:
    chart_df = df.copy()
    chart_df["day"] = pd.to_datetime(chart_df["day"])

    bars = alt.Chart(chart_df).mark_bar().encode(
        x=alt.X("day:T", title="Day", timeUnit="yearmonthdate"),
        y=alt.Y("completed:Q", title="Habits completed", scale=alt.Scale(domainMin=0)),
        tooltip=["day:T", "completed:Q", "total:Q", alt.Tooltip("completion_rate:Q", format=".0%")],
    )
    st.altair_chart(bars, use_container_width=True)


def main() -> None:
    app_header("Habit Tracker", "Build consistent habits, one day at a time")

    store = tracker.store
    today = date.today()

    render_stats(store)
    render_permission_banner()

    habits = store.list()
    if not habits:
        st.info("No habits yet. Create one in **Habits**.")
        return

    for habit in habits:
        render_habit(store, habit, today)

    st.divider()
    st.subheader("This week")
    render_week_chart(week_progress_frame(habits, today))


if __name__ == "__main__":
    main()

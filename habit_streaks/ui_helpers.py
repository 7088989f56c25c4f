"""
UI helpers shared across pages (Streamlit).

Keeping this separate avoids repeating small formatting bits, and makes sure
every page talks to the same tracker instance.
"""

from __future__ import annotations

import atexit
from datetime import date

import streamlit as st

from .config import AppConfig, configure_logging
from .metrics import week_frame
from .models import Habit
from .tracker import HabitTracker


@st.cache_resource
def get_tracker() -> HabitTracker:
    # one store and one reminder scheduler per server process
    config = AppConfig.from_env()
    configure_logging(config)
    tracker = HabitTracker.from_config(config)
    atexit.register(tracker.close)
    return tracker


def app_header(title: str, subtitle: str | None = None) -> None:
    st.title(title)
    if subtitle:
        st.caption(subtitle)


def habit_title(habit: Habit) -> str:
    return f"{habit.emoji} **{habit.name}**"


def color_chip(habit: Habit) -> str:
    return f"<span style='color:{habit.color}'>●</span>"


def render_week_strip(habit: Habit, today: date) -> None:
    df = week_frame(habit, today)
    cols = st.columns(len(df))
    for col, row in zip(cols, df.itertuples(index=False)):
        with col:
            st.caption(row.label)
            st.write("🟩" if row.done else "⬜")


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

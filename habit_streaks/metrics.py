"""
Metrics and date logic: streaks, the rolling week, day completion.

Everything here is a pure function of the completion dates and a reference
"today", so the pages and the tests can pass any day they like.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from .models import Habit


WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]  # 0..6


def weekday_letter(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()][0]


def daterange(start: date, end: date) -> List[date]:
    """
    Inclusive date range.
    """
    days = []
    cur = start
    while cur <= end:
        days.append(cur)
        cur += timedelta(days=1)
    return days


def is_completed_on(completed_dates: Iterable[date], day: date) -> bool:
    return day in set(completed_dates)


def current_streak(completed_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive completed days ending today.

    If today is not marked yet but yesterday is, the run is still alive and
    is counted back from yesterday. Any other gap ends the streak, and so
    does a newest date after today.
    """
    ordered = sorted(set(completed_dates), reverse=True)
    streak = 0
    offset = 0
    for i, d in enumerate(ordered):
        gap = (today - d).days
        if gap == i + offset:
            streak += 1
        elif i == 0 and gap == 1:
            # grace for today: the run starts at yesterday
            offset = 1
            streak += 1
        else:
            break
    return streak


def last_7_days(today: date) -> List[Tuple[date, str]]:
    """
    The week ending at today, oldest first, with one-letter weekday labels.
    """
    return [(d, weekday_letter(d)) for d in daterange(today - timedelta(days=6), today)]


def streak_label(streak: int) -> str:
    return f"{streak} day{'s' if streak != 1 else ''}"


def week_frame(habit: Habit, today: date) -> pd.DataFrame:
    """
    One row per day of the rolling week for a single habit.

    Columns:
      - day (date)
      - label (one-letter weekday)
      - done (bool)
    """
    done = set(habit.completed_dates)
    rows = [{"day": d, "label": label, "done": d in done} for d, label in last_7_days(today)]
    return pd.DataFrame(rows, columns=["day", "label", "done"])


def week_progress_frame(habits: Sequence[Habit], today: date) -> pd.DataFrame:
    """
    Completions per day across all habits for the rolling week.

    Columns:
      - day (date)
      - label (one-letter weekday)
      - completed (int)
      - total (int, number of habits)
      - completion_rate (float, 0..1)
    """
    rows = []
    for d, label in last_7_days(today):
        completed = sum(1 for h in habits if h.is_completed_on(d))
        rows.append({"day": d, "label": label, "completed": completed, "total": len(habits)})
    df = pd.DataFrame(rows, columns=["day", "label", "completed", "total"])
    df["completion_rate"] = df.apply(lambda r: (r["completed"] / r["total"]) if r["total"] else 0.0, axis=1)
    return df

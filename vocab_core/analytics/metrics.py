"""
Metric computations for analytics dashboards.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

import pandas as pd

from vocab_core.srs.review_state import ReviewState, ensure_utc, to_record

STATE_COLUMNS = [
    "item_id",
    "level",
    "ease_factor",
    "interval",
    "next_review_at",
    "review_count",
    "correct_count",
    "incorrect_count",
    "last_reviewed_at",
]


def load_states_df(states: Iterable[ReviewState]) -> pd.DataFrame:
    """
    Load review states into a dataframe with UTC timestamp columns.
    """
    rows = [to_record(state) for state in states]
    if not rows:
        return pd.DataFrame(columns=STATE_COLUMNS)

    df = pd.DataFrame(rows, columns=STATE_COLUMNS)
    df["next_review_at"] = pd.to_datetime(df["next_review_at"], utc=True)
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True)
    return df


def build_forecast_index(now: datetime, days: int) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index starting at the day containing `now`.

    A naive `now` is taken to be UTC.
    """
    today = pd.Timestamp(ensure_utc(now)).tz_convert("UTC").floor("D")
    return pd.date_range(start=today, periods=days, freq="D")


def compute_due_forecast(
    states: Iterable[ReviewState],
    now: datetime,
    days: int = 7
) -> pd.Series:
    """
    Number of items falling due on each of the next `days` UTC days.

    Overdue items are counted on day 0; items due after the window are
    left out.
    """
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")

    day_index = build_forecast_index(now, days)
    df = load_states_df(states)
    if df.empty:
        return pd.Series(0, index=day_index, dtype="int64")

    start = day_index[0]
    due_day = df["next_review_at"].dt.floor("D")
    due_day = due_day.where(due_day >= start, start)
    counts = due_day.value_counts()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def compute_level_distribution(states: Iterable[ReviewState]) -> pd.Series:
    """
    Count of items at each repetition level, ascending by level.
    """
    df = load_states_df(states)
    if df.empty:
        return pd.Series(dtype="int64")
    return df["level"].astype("int64").value_counts().sort_index().astype("int64")

"""Reshape raw Geredis interval readings into statistics-ready points."""

from typing import Dict, List
import pandas as pd

# Geredis reports the interval length as e.g. "PT30M"; readings without it
# are treated as instantaneous.
DEFAULT_INTERVAL = "PT1M"


def format_load_curve(samples: List[Dict]) -> List[Dict]:
    """Average load-curve power readings per hour.

    Each reading is stamped with the END of its interval, so it is shifted
    back by its interval length before being bucketed into the hour it
    belongs to. The hourly mean power in W is the hour's energy in Wh.
    """
    df = pd.DataFrame(samples)
    if df.empty:
        return []
    if "interval_length" in df:
        lengths = df["interval_length"].fillna(DEFAULT_INTERVAL)
    else:
        lengths = pd.Series(DEFAULT_INTERVAL, index=df.index)
    durations = pd.to_timedelta(lengths.astype(str), errors="coerce").fillna(pd.Timedelta(DEFAULT_INTERVAL))
    starts = pd.to_datetime(df["date"]) - durations
    hourly = pd.to_numeric(df["value"]).groupby(starts.dt.floor("h")).mean()
    return [{"date": ts, "value": float(value)} for ts, value in hourly.items()]


def format_daily_data(samples: List[Dict]) -> List[Dict]:
    df = pd.DataFrame(samples)
    if df.empty:
        return []
    df = df.assign(date=pd.to_datetime(df["date"]), value=pd.to_numeric(df["value"]))
    df = df.sort_values("date", kind="stable")
    return [{"date": ts, "value": float(value)} for ts, value in zip(df["date"], df["value"])]


def format_as_statistics(points: List[Dict]) -> List[Dict]:
    """Turn data points into ``{start, state, sum}`` records with a running total."""
    if not points:
        return []
    df = pd.DataFrame(points)
    totals = df["value"].cumsum()
    return [
        {"start": pd.Timestamp(ts).isoformat(), "state": float(value), "sum": float(total)}
        for ts, value, total in zip(df["date"], df["value"], totals)
    ]


def statistics_to_dataframe(stats: List[Dict]) -> pd.DataFrame:
    if not stats:
        return pd.DataFrame(columns=["start", "state", "sum"])
    df = pd.DataFrame(stats)
    df["start"] = pd.to_datetime(df["start"])
    return df

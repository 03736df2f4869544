from __future__ import annotations

import calendar
import datetime as dt
from typing import Optional

import pandas as pd


def reference_time(now: Optional[dt.datetime] = None) -> dt.datetime:
    return now if now is not None else dt.datetime.now()


def to_naive(moment: dt.datetime) -> dt.datetime:
    """Aware datetimes are converted to UTC and lose their offset; naive ones pass through."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment
    return moment.astimezone(dt.timezone.utc).replace(tzinfo=None)


def parse_datetime(raw: str) -> dt.datetime:
    return to_naive(dt.datetime.fromisoformat(raw))


def shift_months(moment: dt.datetime, months: int) -> dt.datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    return (pd.Timestamp(moment) + pd.DateOffset(months=months)).to_pydatetime()


def start_of_day(moment: dt.datetime) -> dt.datetime:
    return dt.datetime(moment.year, moment.month, moment.day)


def month_start(moment: dt.datetime) -> dt.datetime:
    return dt.datetime(moment.year, moment.month, 1)


def days_in_month(moment: dt.datetime) -> int:
    return calendar.monthrange(moment.year, moment.month)[1]

# core/time_utils.py
from datetime import datetime, timedelta, timezone, date, time
from typing import Optional, List, Tuple
import pytz

from core.config import TIMEZONE

LOCAL_TZ = pytz.timezone(TIMEZONE)

def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

def now_local() -> datetime:
    return datetime.now(LOCAL_TZ)

def today_iso() -> str:
    return now_local().date().isoformat()

def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    y, m, d = map(int, str(value).split("-"))
    return date(y, m, d)

def to_utc_naive(dt: datetime) -> datetime:
    """Return UTC-naive datetime for Mongo 'date' type; naive input is local time."""
    if dt.tzinfo is None:
        dt = LOCAL_TZ.localize(dt)
    return dt.astimezone(timezone.utc).replace(tzinfo=None)

def to_local_display(dt: Optional[datetime]) -> datetime:
    """Make any Mongo datetime (usually UTC-naive) safely local-aware for display."""
    if not isinstance(dt, datetime):
        return now_local()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(LOCAL_TZ)

def day_window(day) -> Tuple[datetime, datetime]:
    """UTC-naive [start, end] of a local calendar day, both ends inclusive."""
    d = parse_date(day)
    start = LOCAL_TZ.localize(datetime.combine(d, time.min))
    end = LOCAL_TZ.localize(datetime.combine(d, time.max))
    return to_utc_naive(start), to_utc_naive(end)

def monday_of(day) -> date:
    d = parse_date(day)
    return d - timedelta(days=d.weekday())

def week_dates_list(day) -> List[str]:
    mon = monday_of(day)
    return [(mon + timedelta(days=i)).isoformat() for i in range(7)]

def week_window(day) -> Tuple[datetime, datetime]:
    mon = monday_of(day)
    start, _ = day_window(mon)
    _, end = day_window(mon + timedelta(days=6))
    return start, end

def month_start(d: date, back: int = 0) -> date:
    """First day of the month `back` months before d's month."""
    idx = d.year * 12 + (d.month - 1) - back
    return date(idx // 12, idx % 12 + 1, 1)

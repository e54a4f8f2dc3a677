# services/analytics_service.py
import math
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from core.constants import TASK_TYPE_COLORS, DEFAULT_TYPE_COLOR
from core.time_utils import day_window, month_start, parse_date, to_local_display, week_dates_list

DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
STAT_COLUMNS = ["date", "focus_time", "tasks_completed", "pomodoro_sessions", "efficiency_score"]


def _round(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def stats_frame(stats: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(list(stats), columns=STAT_COLUMNS)
    for c in STAT_COLUMNS[1:]:
        df[c] = pd.to_numeric(df[c], errors="coerce").fillna(0).astype(int)
    df["date"] = df["date"].astype(str)
    return df


def weekly_focus_hours(stats: Iterable[Dict[str, Any]], day) -> List[Dict[str, Any]]:
    """Focus hours for each day Mon..Sun of the week containing `day`."""
    df = stats_frame(stats)
    by_date = df.groupby("date")["focus_time"].sum().to_dict() if not df.empty else {}
    return [{"day": DAY_LABELS[i], "date": d, "hours": round(by_date.get(d, 0) / 60.0, 2)}
            for i, d in enumerate(week_dates_list(day))]


def tasks_by_type(tasks: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    return dict(Counter(t.get("type") or "other" for t in tasks))


def category_breakdown(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counts = tasks_by_type(tasks)
    rows = [{"type": t, "name": t.capitalize(), "value": n,
             "color": TASK_TYPE_COLORS.get(t, DEFAULT_TYPE_COLOR)} for t, n in counts.items()]
    return sorted(rows, key=lambda r: -r["value"])


def monthly_progress(stats: Iterable[Dict[str, Any]], today, months: int = 6) -> List[Dict[str, Any]]:
    """Focus hours and mean efficiency per calendar month, oldest first, current month last."""
    df = stats_frame(stats)
    today = parse_date(today)
    out = []
    for back in range(months - 1, -1, -1):
        lo = month_start(today, back)
        hi = month_start(today, back - 1)
        m = df[(df["date"] >= lo.isoformat()) & (df["date"] < hi.isoformat())]
        out.append({
            "month": lo.strftime("%b"),
            "month_start": lo.isoformat(),
            "focus": _round(m["focus_time"].sum() / 60.0) if not m.empty else 0,
            "efficiency": _round(m["efficiency_score"].mean()) if not m.empty else 0,
        })
    return out


def _has_activity(row: Dict[str, Any]) -> bool:
    return (int(row.get("pomodoro_sessions") or 0) > 0 or int(row.get("tasks_completed") or 0) > 0
            or int(row.get("focus_time") or 0) > 0)


def current_streak(stats: Iterable[Dict[str, Any]], today) -> int:
    """
    Consecutive active days ending at the most recent row. Counts only when
    that row is today or yesterday; stops at the first gap or idle day.
    """
    rows = sorted(stats, key=lambda s: str(s.get("date")), reverse=True)
    if not rows:
        return 0
    today = parse_date(today)
    latest = parse_date(rows[0]["date"])
    if (today - latest).days > 1:
        return 0

    streak = 0
    expected = latest
    for row in rows:
        if parse_date(row["date"]) != expected:
            break
        if not _has_activity(row):
            break
        streak += 1
        expected = expected - timedelta(days=1)
    return streak


def overall_summary(stats: Iterable[Dict[str, Any]], today) -> Dict[str, int]:
    stats = list(stats)
    df = stats_frame(stats)
    return {
        "total_focus_hours": _round(df["focus_time"].sum() / 60.0) if not df.empty else 0,
        "tasks_completed": int(df["tasks_completed"].sum()) if not df.empty else 0,
        "efficiency": _round(df["efficiency_score"].mean()) if not df.empty else 0,
        "streak": current_streak(stats, today),
    }


def completion_rate(tasks: Iterable[Dict[str, Any]]) -> int:
    tasks = list(tasks)
    if not tasks:
        return 0
    done = sum(1 for t in tasks if t.get("completed"))
    return _round(done / len(tasks) * 100.0)


def most_productive_hours(sessions: Iterable[Dict[str, Any]], top: int = 3) -> List[int]:
    """Local hours with the most pomodoro starts; ties go to the earlier hour."""
    hours = [to_local_display(s["started_at"]).hour for s in sessions if s.get("started_at")]
    if not hours:
        return []
    counts = np.bincount(np.array(hours, dtype=int), minlength=24)
    order = np.argsort(-counts, kind="stable")
    return [int(h) for h in order if counts[h] > 0][:top]


def build_insights_summary(stats: List[Dict[str, Any]], tasks: List[Dict[str, Any]],
                           sessions: List[Dict[str, Any]], recent_days: int = 7) -> Dict[str, Any]:
    """
    Condense the last month of activity for the insights prompt.
    `stats` newest first, as returned by StatsRepo.list_all.
    """
    df = stats_frame(stats)
    return {
        "total_focus_hours": _round(df["focus_time"].sum() / 60.0) if not df.empty else 0,
        "total_tasks": int(df["tasks_completed"].sum()) if not df.empty else 0,
        "avg_efficiency": _round(df["efficiency_score"].mean()) if not df.empty else 0,
        "total_pomodoros": int(df["pomodoro_sessions"].sum()) if not df.empty else 0,
        "completion_rate": completion_rate(tasks),
        "tasks_by_type": tasks_by_type(tasks),
        "most_productive_hours": most_productive_hours(sessions),
        "recent_days": [
            {"date": r["date"], "focus_time": int(r["focus_time"]),
             "tasks_completed": int(r["tasks_completed"]), "efficiency": int(r["efficiency_score"])}
            for r in df.head(recent_days).to_dict("records")
        ],
    }


def window_start(today, days: int = 30) -> date:
    return parse_date(today) - timedelta(days=days)


def today_overview(stats_repo, tasks_repo, user_id: str, today) -> Optional[Dict[str, int]]:
    """Sidebar numbers for one day; tasks_planned is counted live, never read from the row."""
    row = stats_repo.get_day(user_id, str(today))
    if not row:
        return None
    start, end = day_window(today)
    return {
        "efficiency": int(row.get("efficiency_score") or 0),
        "pomodoros": int(row.get("pomodoro_sessions") or 0),
        "focus_time": int(row.get("focus_time") or 0),
        "tasks_completed": int(row.get("tasks_completed") or 0),
        "tasks_planned": tasks_repo.count_in_window(user_id, start, end),
    }

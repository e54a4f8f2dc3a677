# services/efficiency.py
"""
Daily efficiency score.

The score is a 0-100 blend of three sub-scores, each normalised to 0-100
before weighting:

* task completion (35%): completion rate against tasks scheduled for the day,
  or 20 points per finished task when nothing was scheduled;
* pomodoro consistency (35%): full marks for 6-10 work intervals, a linear
  ramp below, 5 points off per extra session above (never under 70);
* focus time quality (30%): full marks for 120-360 minutes, a linear ramp
  below, 3 points off per extra hour above (never under 80).

`efficiency_score` on a user_stats row is materialised from the row's counts.
It is only refreshed by `update_daily_efficiency`, which runs when a
pomodoro work interval completes and when a task goes from open to done.
Un-completing, creating, editing or deleting a task does NOT refresh it.
"""
import logging
import math
from typing import Optional

from pymongo.errors import PyMongoError

from core.time_utils import today_iso, day_window

logger = logging.getLogger(__name__)

TASK_WEIGHT = 0.35
POMODORO_WEIGHT = 0.35
FOCUS_WEIGHT = 0.30

POINTS_PER_UNPLANNED_TASK = 20

POMODORO_BAND = (6, 10)
POMODORO_PENALTY = 5
POMODORO_FLOOR = 70

FOCUS_BAND = (120, 360)
FOCUS_PENALTY_PER_HOUR = 3
FOCUS_FLOOR = 80

MAX_WRITE_ATTEMPTS = 3


def task_subscore(tasks_planned: int, tasks_completed: int) -> float:
    if tasks_completed <= 0:
        return 0.0
    if tasks_planned > 0:
        return min(100.0, tasks_completed / tasks_planned * 100.0)
    return float(min(100, tasks_completed * POINTS_PER_UNPLANNED_TASK))


def pomodoro_subscore(pomodoro_sessions: int) -> float:
    if pomodoro_sessions <= 0:
        return 0.0
    lo, hi = POMODORO_BAND
    if pomodoro_sessions < lo:
        return pomodoro_sessions / lo * 100.0
    if pomodoro_sessions > hi:
        return float(max(POMODORO_FLOOR, 100 - (pomodoro_sessions - hi) * POMODORO_PENALTY))
    return 100.0


def focus_subscore(focus_time_minutes: int) -> float:
    if focus_time_minutes <= 0:
        return 0.0
    lo, hi = FOCUS_BAND
    if focus_time_minutes < lo:
        return focus_time_minutes / lo * 100.0
    if focus_time_minutes > hi:
        return max(float(FOCUS_FLOOR), 100 - (focus_time_minutes - hi) / 60 * FOCUS_PENALTY_PER_HOUR)
    return 100.0


def calculate_efficiency(*, tasks_planned: int = 0, tasks_completed: int,
                         pomodoro_sessions: int, focus_time_minutes: int) -> int:
    """Score a day's activity from 0 to 100. No activity scores 0 whatever was planned."""
    if tasks_completed == 0 and pomodoro_sessions == 0 and focus_time_minutes == 0:
        return 0

    total = (task_subscore(tasks_planned, tasks_completed) * TASK_WEIGHT
             + pomodoro_subscore(pomodoro_sessions) * POMODORO_WEIGHT
             + focus_subscore(focus_time_minutes) * FOCUS_WEIGHT)
    total = min(100.0, max(0.0, total))
    # half-up, not banker's rounding
    return int(math.floor(total + 0.5))


def update_daily_efficiency(stats_repo, tasks_repo, user_id: str,
                            additional_tasks_completed: int = 0,
                            today: Optional[str] = None) -> Optional[int]:
    """
    Recompute today's efficiency_score and write it back.

    `additional_tasks_completed` is a just-finished task not yet counted on the
    row; it is added to the stored count and persisted with the score. Calling
    this twice with the same delta counts it twice, so call it on the
    transition edge only.

    Best effort: storage errors and a missing row are logged, never raised.
    Returns the new score, or None when nothing was written.
    """
    today = today or today_iso()
    delta = max(0, int(additional_tasks_completed))

    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        try:
            stats = stats_repo.get_day(user_id, today)
        except PyMongoError as e:
            logger.error("Error fetching stats for %s on %s: %s", user_id, today, e)
            return None

        if not stats:
            logger.warning("No stats found for %s on %s; skipping efficiency update", user_id, today)
            return None

        try:
            start, end = day_window(today)
            tasks_planned = tasks_repo.count_in_window(user_id, start, end)
        except PyMongoError as e:
            logger.error("Error counting planned tasks for %s on %s: %s", user_id, today, e)
            return None

        tasks_completed = int(stats.get("tasks_completed") or 0) + delta
        pomodoros = int(stats.get("pomodoro_sessions") or 0)
        focus_time = int(stats.get("focus_time") or 0)

        score = calculate_efficiency(
            tasks_planned=tasks_planned,
            tasks_completed=tasks_completed,
            pomodoro_sessions=pomodoros,
            focus_time_minutes=focus_time,
        )
        logger.debug("Efficiency for %s on %s: planned=%d completed=%d pomodoros=%d focus=%d -> %d",
                     user_id, today, tasks_planned, tasks_completed, pomodoros, focus_time, score)

        fields = {"efficiency_score": score}
        if delta > 0:
            fields["tasks_completed"] = tasks_completed

        try:
            written = stats_repo.update_if_unchanged(stats["_id"], stats.get("rev"), fields)
        except PyMongoError as e:
            logger.error("Error updating efficiency for %s on %s: %s", user_id, today, e)
            return None

        if written:
            logger.info("Efficiency for %s on %s updated to %d", user_id, today, score)
            return score
        logger.info("Stats for %s on %s changed concurrently (attempt %d/%d); recomputing",
                    user_id, today, attempt, MAX_WRITE_ATTEMPTS)

    logger.warning("Gave up updating efficiency for %s on %s after %d attempts",
                   user_id, today, MAX_WRITE_ATTEMPTS)
    return None

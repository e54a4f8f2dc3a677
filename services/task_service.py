# services/task_service.py
import logging
from datetime import datetime, time
from typing import Any, Dict, List, Optional, Tuple
from pymongo.errors import PyMongoError

from core.constants import TASK_TYPES
from core.time_utils import LOCAL_TZ, day_window, week_window, parse_date, to_utc_naive, today_iso
from services.efficiency import update_daily_efficiency

logger = logging.getLogger(__name__)


class TaskValidationError(ValueError):
    pass


class TaskNotFoundError(LookupError):
    pass


def _parse_hhmm(value: str) -> time:
    try:
        hh, mm = str(value).strip().split(":")[:2]
        return time(int(hh), int(mm))
    except (TypeError, ValueError):
        raise TaskValidationError(f"Invalid time: {value!r}")


def build_task_window(day, start_hhmm: str, end_hhmm: str) -> Tuple[datetime, datetime]:
    """Local date + 'HH:MM' pair from a form -> UTC-naive (start, end)."""
    try:
        d = parse_date(day)
    except (TypeError, ValueError):
        raise TaskValidationError(f"Invalid date: {day!r}")
    start = LOCAL_TZ.localize(datetime.combine(d, _parse_hhmm(start_hhmm)))
    end = LOCAL_TZ.localize(datetime.combine(d, _parse_hhmm(end_hhmm)))
    return to_utc_naive(start), to_utc_naive(end)


def validate_task(title: str, task_type: str, start_time: datetime, end_time: datetime):
    if not title or not str(title).strip():
        raise TaskValidationError("Title is required")
    if task_type not in TASK_TYPES:
        raise TaskValidationError(f"Unknown task type {task_type!r}; expected one of {', '.join(TASK_TYPES)}")
    if not isinstance(start_time, datetime) or not isinstance(end_time, datetime):
        raise TaskValidationError("Start and end time are required")
    if end_time <= start_time:
        raise TaskValidationError("End time must be after start time")


class TaskService:
    def __init__(self, tasks_repo, stats_repo):
        self.tasks_repo = tasks_repo
        self.stats_repo = stats_repo

    def list_week(self, user_id: str, day) -> List[Dict[str, Any]]:
        start, end = week_window(day)
        return self.tasks_repo.list_in_window(user_id, start, end)

    def list_day(self, user_id: str, day) -> List[Dict[str, Any]]:
        start, end = day_window(day)
        return self.tasks_repo.list_in_window(user_id, start, end)

    def create_task(self, user_id: str, title: str, task_type: str,
                    start_time: datetime, end_time: datetime,
                    description: Optional[str] = None) -> Dict[str, Any]:
        validate_task(title, task_type, start_time, end_time)
        doc = self.tasks_repo.insert(user_id, {
            "title": title.strip(),
            "description": (description or "").strip(),
            "type": task_type,
            "start_time": start_time,
            "end_time": end_time,
        })
        logger.info("Created task %s for %s", doc["_id"], user_id)
        return doc

    def update_task(self, user_id: str, task_id: str, title: str, task_type: str,
                    start_time: datetime, end_time: datetime,
                    description: Optional[str] = None):
        # Edits leave the efficiency score alone, even when start_time moves
        # into or out of today.
        validate_task(title, task_type, start_time, end_time)
        ok = self.tasks_repo.update(user_id, task_id, {
            "title": title.strip(),
            "description": (description or "").strip(),
            "type": task_type,
            "start_time": start_time,
            "end_time": end_time,
        })
        if not ok:
            raise TaskNotFoundError(task_id)

    def toggle_completion(self, user_id: str, task_id: str, today: Optional[str] = None) -> bool:
        """
        Flip a task's completed flag and return the new value.

        Only open -> done refreshes today's stats: the row is created if needed
        and the updater adds this task to tasks_completed. Done -> open does
        not decrement the count or recompute the score.
        """
        task = self.tasks_repo.get(user_id, task_id)
        if not task:
            raise TaskNotFoundError(task_id)
        completed = not bool(task.get("completed"))
        if not self.tasks_repo.update(user_id, task_id, {"completed": completed}):
            raise TaskNotFoundError(task_id)

        if completed:
            today = today or today_iso()
            try:
                self.stats_repo.ensure_day(user_id, today)
            except PyMongoError as e:
                logger.error("Could not initialise stats for %s on %s: %s", user_id, today, e)
                return completed
            update_daily_efficiency(self.stats_repo, self.tasks_repo, user_id,
                                    additional_tasks_completed=1, today=today)
        return completed

    def delete_task(self, user_id: str, task_id: str):
        # No recompute here either; tasks_planned only catches up on the next trigger.
        if not self.tasks_repo.delete(user_id, task_id):
            raise TaskNotFoundError(task_id)
        logger.info("Deleted task %s for %s", task_id, user_id)

# data_access/sessions_repo.py
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo import ASCENDING

from core.constants import SESSIONS_COLLECTION
from core.time_utils import utc_now_naive

class SessionsRepo:
    """pomodoro_sessions: one row per started work or break interval."""

    def __init__(self, db):
        self.col = db[SESSIONS_COLLECTION]

    def start(self, uid: str, started_at: datetime, duration_sec: int,
              task_name: str, mode: str) -> str:
        sid = uuid.uuid4().hex[:12]
        self.col.insert_one({
            "_id": sid, "user": uid,
            "started_at": started_at, "duration": int(duration_sec),
            "task_name": task_name, "mode": mode, "completed": False,
            "created_at": utc_now_naive(), "schema_version": 1,
        })
        return sid

    def complete(self, uid: str, sid: str, ended_at: datetime, actual_sec: int) -> bool:
        res = self.col.update_one(
            {"_id": sid, "user": uid},
            {"$set": {"completed": True, "ended_at": ended_at, "actual_seconds": int(actual_sec)}},
        )
        return res.matched_count == 1

    def list_started_since(self, uid: str, since: datetime, mode: Optional[str] = None) -> List[Dict[str, Any]]:
        q: Dict[str, Any] = {"user": uid, "started_at": {"$gte": since}}
        if mode:
            q["mode"] = mode
        return list(self.col.find(q).sort("started_at", ASCENDING))

    def list_in_window(self, uid: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        return list(self.col.find({"user": uid, "started_at": {"$gte": start, "$lte": end}})
                    .sort("started_at", ASCENDING))


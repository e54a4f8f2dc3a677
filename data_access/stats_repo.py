# data_access/stats_repo.py
from typing import Any, Dict, List, Optional
from pymongo import ReturnDocument, DESCENDING

from core.constants import STATS_COLLECTION
from core.time_utils import utc_now_naive

def stat_id(uid: str, date_str: str) -> str:
    return f"{uid}|{date_str}"

def _zero_doc(uid: str, date_str: str) -> Dict[str, Any]:
    return {
        "_id": stat_id(uid, date_str), "user": uid, "date": date_str,
        "efficiency_score": 0, "created_at": utc_now_naive(), "schema_version": 1,
    }

class StatsRepo:
    """user_stats: one aggregate document per user per local date."""

    def __init__(self, db):
        self.col = db[STATS_COLLECTION]

    def get_day(self, uid: str, date_str: str) -> Optional[Dict[str, Any]]:
        return self.col.find_one({"user": uid, "date": date_str})

    def ensure_day(self, uid: str, date_str: str) -> Dict[str, Any]:
        doc = _zero_doc(uid, date_str)
        return self.col.find_one_and_update(
            {"_id": doc["_id"]},
            {"$setOnInsert": {**doc, "focus_time": 0, "pomodoro_sessions": 0,
                              "tasks_completed": 0, "rev": 0}},
            upsert=True, return_document=ReturnDocument.AFTER,
        )

    def add_pomodoro(self, uid: str, date_str: str, focus_min: int) -> Dict[str, Any]:
        """Server-side increment; creates the row on the first pomodoro of the day."""
        doc = _zero_doc(uid, date_str)
        return self.col.find_one_and_update(
            {"_id": doc["_id"]},
            {"$setOnInsert": {**doc, "tasks_completed": 0},
             "$inc": {"focus_time": max(0, int(focus_min)), "pomodoro_sessions": 1, "rev": 1},
             "$set": {"updated_at": utc_now_naive()}},
            upsert=True, return_document=ReturnDocument.AFTER,
        )

    def update_if_unchanged(self, sid: str, expected_rev: Optional[int], fields: Dict[str, Any]) -> bool:
        """Write `fields` only if nobody bumped `rev` since it was read."""
        query = {"_id": sid, "rev": expected_rev if expected_rev is not None else {"$exists": False}}
        res = self.col.update_one(
            query,
            {"$set": {**fields, "updated_at": utc_now_naive()}, "$inc": {"rev": 1}},
        )
        return res.matched_count == 1

    def list_all(self, uid: str, limit: int = 0) -> List[Dict[str, Any]]:
        """Newest first."""
        cur = self.col.find({"user": uid}).sort("date", DESCENDING)
        if limit:
            cur = cur.limit(limit)
        return list(cur)

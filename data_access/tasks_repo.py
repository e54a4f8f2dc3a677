# data_access/tasks_repo.py
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo import ASCENDING

from core.constants import TASKS_COLLECTION
from core.time_utils import utc_now_naive

class TasksRepo:
    def __init__(self, db):
        self.col = db[TASKS_COLLECTION]

    def list_in_window(self, uid: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        return list(self.col.find({"user": uid, "start_time": {"$gte": start, "$lte": end}})
                    .sort("start_time", ASCENDING))

    def count_in_window(self, uid: str, start: datetime, end: datetime) -> int:
        return self.col.count_documents({"user": uid, "start_time": {"$gte": start, "$lte": end}})

    def list_created_since(self, uid: str, since: datetime) -> List[Dict[str, Any]]:
        return list(self.col.find({"user": uid, "created_at": {"$gte": since}}))

    def get(self, uid: str, task_id: str) -> Optional[Dict[str, Any]]:
        return self.col.find_one({"_id": task_id, "user": uid})

    def insert(self, uid: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now_naive()
        doc = {"_id": uuid.uuid4().hex[:12], "user": uid, "completed": False,
               **fields, "created_at": now, "updated_at": now, "schema_version": 1}
        self.col.insert_one(doc)
        return doc

    def update(self, uid: str, task_id: str, fields: Dict[str, Any]) -> bool:
        res = self.col.update_one({"_id": task_id, "user": uid},
                                  {"$set": {**fields, "updated_at": utc_now_naive()}})
        return res.matched_count == 1

    def delete(self, uid: str, task_id: str) -> bool:
        return self.col.delete_one({"_id": task_id, "user": uid}).deleted_count == 1

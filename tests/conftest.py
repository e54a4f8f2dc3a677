"""Shared fixtures: in-memory repositories with the same surface as data_access/."""
import copy
import os
import uuid

os.environ["TIMEZONE"] = "UTC"
os.environ.pop("LLM_API_KEY", None)

import pytest
from pymongo.errors import PyMongoError

from data_access.stats_repo import stat_id


class _Failing:
    """Methods listed in `fail_on` raise PyMongoError."""

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise PyMongoError(f"{name} failed")


class FakeStatsRepo(_Failing):
    def __init__(self):
        self.rows = {}
        self.fail_on = set()
        # number of update_if_unchanged calls that lose to a concurrent writer
        self.conflicts = 0
        self.writes = []

    def seed(self, uid, date_str, **counts):
        row = {"_id": stat_id(uid, date_str), "user": uid, "date": date_str,
               "focus_time": 0, "tasks_completed": 0, "pomodoro_sessions": 0,
               "efficiency_score": 0, "rev": 0}
        row.update(counts)
        self.rows[row["_id"]] = row
        return row

    def get_day(self, uid, date_str):
        self._maybe_fail("get_day")
        row = self.rows.get(stat_id(uid, date_str))
        return copy.deepcopy(row) if row else None

    def ensure_day(self, uid, date_str):
        self._maybe_fail("ensure_day")
        sid = stat_id(uid, date_str)
        if sid not in self.rows:
            self.seed(uid, date_str)
        return copy.deepcopy(self.rows[sid])

    def add_pomodoro(self, uid, date_str, focus_min):
        self._maybe_fail("add_pomodoro")
        sid = stat_id(uid, date_str)
        if sid not in self.rows:
            self.seed(uid, date_str, rev=0)
        row = self.rows[sid]
        row["focus_time"] += max(0, int(focus_min))
        row["pomodoro_sessions"] += 1
        row["rev"] = row.get("rev", 0) + 1
        return copy.deepcopy(row)

    def update_if_unchanged(self, sid, expected_rev, fields):
        self._maybe_fail("update_if_unchanged")
        row = self.rows.get(sid)
        if row is None:
            return False
        if self.conflicts > 0:
            self.conflicts -= 1
            # someone else logged a pomodoro in between
            row["pomodoro_sessions"] += 1
            row["rev"] = row.get("rev", 0) + 1
            return False
        if row.get("rev") != expected_rev:
            return False
        row.update(fields)
        row["rev"] = row.get("rev", 0) + 1
        self.writes.append(dict(fields))
        return True

    def list_all(self, uid, limit=0):
        rows = sorted((copy.deepcopy(r) for r in self.rows.values() if r["user"] == uid),
                      key=lambda r: r["date"], reverse=True)
        return rows[:limit] if limit else rows


class FakeTasksRepo(_Failing):
    def __init__(self):
        self.docs = {}
        self.fail_on = set()

    def _in_window(self, t, uid, start, end):
        return t["user"] == uid and start <= t["start_time"] <= end

    def list_in_window(self, uid, start, end):
        self._maybe_fail("list_in_window")
        return sorted((copy.deepcopy(t) for t in self.docs.values() if self._in_window(t, uid, start, end)),
                      key=lambda t: t["start_time"])

    def count_in_window(self, uid, start, end):
        self._maybe_fail("count_in_window")
        return sum(1 for t in self.docs.values() if self._in_window(t, uid, start, end))

    def list_created_since(self, uid, since):
        return [copy.deepcopy(t) for t in self.docs.values()
                if t["user"] == uid and t.get("created_at") and t["created_at"] >= since]

    def get(self, uid, task_id):
        self._maybe_fail("get")
        t = self.docs.get(task_id)
        return copy.deepcopy(t) if t and t["user"] == uid else None

    def insert(self, uid, fields):
        self._maybe_fail("insert")
        doc = {"_id": uuid.uuid4().hex[:12], "user": uid, "completed": False, **fields}
        self.docs[doc["_id"]] = doc
        return copy.deepcopy(doc)

    def update(self, uid, task_id, fields):
        self._maybe_fail("update")
        t = self.docs.get(task_id)
        if not t or t["user"] != uid:
            return False
        t.update(fields)
        return True

    def delete(self, uid, task_id):
        self._maybe_fail("delete")
        t = self.docs.get(task_id)
        if not t or t["user"] != uid:
            return False
        del self.docs[task_id]
        return True


class FakeSessionsRepo(_Failing):
    def __init__(self):
        self.docs = {}
        self.fail_on = set()

    def start(self, uid, started_at, duration_sec, task_name, mode):
        self._maybe_fail("start")
        sid = uuid.uuid4().hex[:12]
        self.docs[sid] = {"_id": sid, "user": uid, "started_at": started_at,
                          "duration": int(duration_sec), "task_name": task_name,
                          "mode": mode, "completed": False}
        return sid

    def complete(self, uid, sid, ended_at, actual_sec):
        self._maybe_fail("complete")
        s = self.docs.get(sid)
        if not s:
            return False
        s.update({"completed": True, "ended_at": ended_at, "actual_seconds": int(actual_sec)})
        return True

    def list_started_since(self, uid, since, mode=None):
        return sorted((copy.deepcopy(s) for s in self.docs.values()
                       if s["user"] == uid and s["started_at"] >= since and (not mode or s["mode"] == mode)),
                      key=lambda s: s["started_at"])

    def list_in_window(self, uid, start, end):
        return sorted((copy.deepcopy(s) for s in self.docs.values()
                       if s["user"] == uid and start <= s["started_at"] <= end),
                      key=lambda s: s["started_at"])


@pytest.fixture
def stats_repo():
    return FakeStatsRepo()


@pytest.fixture
def tasks_repo():
    return FakeTasksRepo()


@pytest.fixture
def sessions_repo():
    return FakeSessionsRepo()

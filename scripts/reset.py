#!/usr/bin/env python3
"""
Reset Focus Studio data for a single user: daily stats, tasks and pomodoro sessions.

Env:
  MONGO_URI   (required)
  DB_NAME     (default: Focus_Studio)
  USER_ID     (default: default)
  DRY_RUN     (default: true)  -> set to "false" to actually delete
"""
import os
from datetime import datetime, timezone
from pymongo import MongoClient
import certifi

MONGO_URI = os.getenv("MONGO_URI", "")
DB_NAME   = os.getenv("DB_NAME", "Focus_Studio")
USER_ID   = os.getenv("USER_ID", "default")
DRY_RUN   = (os.getenv("DRY_RUN", "true").lower() != "false")

COLLECTIONS = ["user_stats", "tasks", "pomodoro_sessions"]


def count_all(db):
    return {c: db[c].count_documents({"user": USER_ID}) for c in COLLECTIONS}


def print_counts(label, counts):
    print(f"\n[{label}] per-collection user-doc counts")
    for c, n in counts.items():
        print(f"  {c:18} : {n}")


def main():
    if not MONGO_URI:
        raise SystemExit("MONGO_URI is required")

    client = MongoClient(MONGO_URI, tlsCAFile=certifi.where(), serverSelectionTimeoutMS=8000)
    client.admin.command("ping")
    db = client[DB_NAME]

    print(f"[cfg] DB={DB_NAME} USER={USER_ID} DRY_RUN={DRY_RUN}")
    print("Collections:", ", ".join(sorted(db.list_collection_names())))
    print_counts("before", count_all(db))

    if DRY_RUN:
        print("\n[dry-run] No deletes performed. Set DRY_RUN=false to apply.")
        return

    total_deleted = 0
    for c in COLLECTIONS:
        res = db[c].delete_many({"user": USER_ID})
        print(f"[deleted] {c:18} : {res.deleted_count}")
        total_deleted += res.deleted_count
    print(f"\n[done] Total deleted: {total_deleted} docs @ {datetime.now(timezone.utc).isoformat()}")
    print_counts("after", count_all(db))


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Index audit for Focus Studio.
Run:
  python -m scripts.ensure_indexes --uri "mongodb+srv://..." [--db Focus_Studio] [--create] [--drop-stray-indexes]
"""

import argparse
import os
from typing import Dict, List

import certifi
from pymongo import MongoClient
from pymongo.errors import OperationFailure

from core.db import EXPECTED_INDEXES


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--uri", default=os.getenv("MONGO_URI"), help="MongoDB connection URI (default: $MONGO_URI)")
    p.add_argument("--db", default=os.getenv("DB_NAME", "Focus_Studio"), help="Database name")
    p.add_argument("--create", action="store_true", help="Create missing expected indexes")
    p.add_argument("--drop-stray-indexes", action="store_true", help="Drop unknown custom indexes (never _id_)")
    return p.parse_args()


def audit_indexes(col, expected_defs) -> Dict[str, List[str]]:
    """
    An index counts as present when its KEYS match, even under another name.
    Stray = any index that is neither expected nor the default _id_.
    """
    current = list(col.list_indexes())
    cur_keys = [list(dict(ix.get("key", {})).items()) for ix in current]
    expected_names = {name for _, name, _ in expected_defs}

    present, missing = [], []
    for keys, name, _unique in expected_defs:
        (present if list(keys) in cur_keys else missing).append(name)

    expected_keys = [list(k) for k, _, _ in expected_defs]
    stray = [ix.get("name") for ix, keys in zip(current, cur_keys)
             if ix.get("name") not in expected_names and keys != [("_id", 1)] and keys not in expected_keys]
    return {"present": present, "missing": missing, "stray": stray}


def create_missing(col, expected_defs, missing: List[str]) -> int:
    created = 0
    for keys, name, unique in expected_defs:
        if name not in missing:
            continue
        try:
            col.create_index(keys, name=name, unique=unique)
            created += 1
        except OperationFailure as e:
            print(f"  ⚠️  Could not create index {name} on {col.name}: {e}")
    return created


def drop_stray_indexes(col, stray_names: List[str]) -> int:
    dropped = 0
    for n in stray_names:
        try:
            col.drop_index(n)
            dropped += 1
        except OperationFailure as e:
            print(f"  ⚠️  Could not drop index {n} on {col.name}: {e}")
    return dropped


def main():
    args = parse_args()
    if not args.uri:
        raise SystemExit("--uri or MONGO_URI is required")
    client = MongoClient(args.uri, tlsCAFile=certifi.where(), serverSelectionTimeoutMS=8000)
    db = client[args.db]

    print("🔎 Index audit")
    for col_name, defs in EXPECTED_INDEXES.items():
        col = db[col_name]
        report = audit_indexes(col, defs)
        print(f"  {col_name}: present={report['present']}, missing={report['missing']}, stray={report['stray']}")
        if args.create and report["missing"]:
            n = create_missing(col, defs, report["missing"])
            print(f"  ✅ Created {n} indexes on {col_name}")
        if args.drop_stray_indexes and report["stray"]:
            n = drop_stray_indexes(col, report["stray"])
            print(f"  ✅ Dropped {n} stray indexes from {col_name}")

    print("\n✨ Done.")


if __name__ == "__main__":
    main()

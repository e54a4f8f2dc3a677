# core/db.py
import certifi
import streamlit as st
from pymongo import ASCENDING, MongoClient

from core.config import MONGO_URI, DB_NAME, USER_ID
from core.constants import STATS_COLLECTION, TASKS_COLLECTION, SESSIONS_COLLECTION

__all__ = ["get_db", "ensure_indexes", "EXPECTED_INDEXES", "USER_ID"]

# collection -> [(keys, name, unique)]
EXPECTED_INDEXES = {
    STATS_COLLECTION: [([("user", ASCENDING), ("date", ASCENDING)], "user_date", True)],
    TASKS_COLLECTION: [([("user", ASCENDING), ("start_time", ASCENDING)], "user_start", False)],
    SESSIONS_COLLECTION: [([("user", ASCENDING), ("started_at", ASCENDING)], "user_started", False)],
}

def ensure_indexes(db):
    for col_name, defs in EXPECTED_INDEXES.items():
        for keys, name, unique in defs:
            db[col_name].create_index(keys, name=name, unique=unique)

@st.cache_resource
def get_db():
    if not MONGO_URI:
        st.error("MONGO_URI is not configured.")
        st.stop()
    try:
        client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=8000, tlsCAFile=certifi.where())
        client.admin.command("ping")
        db = client[DB_NAME]
        ensure_indexes(db)
        return db
    except Exception as e:
        st.error(f"Could not connect to MongoDB: {e}")
        st.stop()

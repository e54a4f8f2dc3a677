# app.py
import logging
import streamlit as st
from pymongo.errors import PyMongoError

from core.config import APP_TITLE, PAGE_ICON, LOG_LEVEL, LOG_FILE, LLM_API_KEY
from core.db import get_db, USER_ID
from core.log import setup_logging
from core.time_utils import today_iso
from services.analytics_service import today_overview
from ui.deps import get_repos
from ui.tabs.focus_tab import render_focus_tab, tick_if_running
from ui.tabs.calendar_tab import render_calendar_tab
from ui.tabs.analytics_tab import render_analytics_tab

setup_logging(LOG_LEVEL, LOG_FILE)
logger = logging.getLogger("focus_studio")

st.set_page_config(page_title=APP_TITLE, page_icon=PAGE_ICON, layout="wide")

db = get_db()
today = today_iso()
stats_repo, tasks_repo, _ = get_repos()

# Sidebar
st.sidebar.header("⚙️ Connection")
st.sidebar.write(f"**DB:** `{db.name}`")
st.sidebar.write(f"**User:** `{USER_ID}`")
st.sidebar.write(f"**AI:** {'configured' if LLM_API_KEY else 'not configured (fallback insights)'}")

with st.sidebar.expander("🔍 Diagnostics", expanded=False):
    try:
        info = db.command("buildInfo")
        st.write("Connected:", True)
        st.write("Mongo Version:", info.get("version"))
        st.write("Collections:", sorted(db.list_collection_names()))
    except Exception as e:
        logger.warning("Diagnostics failed: %s", e)
        st.error(f"Diagnostics failed: {e}")

st.sidebar.subheader(f"📅 Today {today}")
try:
    overview = today_overview(stats_repo, tasks_repo, USER_ID, today)
except PyMongoError as e:
    logger.error("Could not load today's stats: %s", e)
    overview = None
if overview:
    c1, c2 = st.sidebar.columns(2)
    c1.metric("Efficiency", f"{overview['efficiency']}%")
    c2.metric("Pomodoros", overview["pomodoros"])
    st.sidebar.caption(f"Focus {overview['focus_time']} min · "
                       f"Tasks {overview['tasks_completed']}/{overview['tasks_planned']}")
else:
    st.sidebar.info("No activity recorded today yet.")

# Tabs
tab1, tab2, tab3 = st.tabs(["🍅 Focus", "📅 Calendar", "📊 Analytics"])

with tab1:
    render_focus_tab(USER_ID)

with tab2:
    render_calendar_tab(USER_ID)

with tab3:
    render_analytics_tab(USER_ID)

tick_if_running(USER_ID)

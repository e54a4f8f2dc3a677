# ui/tabs/calendar_tab.py
import streamlit as st
from datetime import timedelta
from pymongo.errors import PyMongoError

from core.constants import TASK_TYPES, TASK_TYPE_ICONS
from core.time_utils import now_local, monday_of, to_local_display
from services.task_service import TaskNotFoundError, TaskValidationError, build_task_window
from ui.deps import get_task_service

def _task_form(key: str, task=None):
    """Create/edit form; returns (submitted, values)."""
    start = to_local_display(task["start_time"]) if task else None
    end = to_local_display(task["end_time"]) if task else None
    default_hour = now_local().replace(minute=0, second=0, microsecond=0)
    with st.form(key, clear_on_submit=task is None):
        title = st.text_input("Title", value=(task or {}).get("title", ""))
        description = st.text_area("Description", value=(task or {}).get("description", ""), height=80)
        ttype = st.selectbox("Type", TASK_TYPES,
                             index=TASK_TYPES.index(task["type"]) if task and task.get("type") in TASK_TYPES else 0,
                             format_func=lambda t: f"{TASK_TYPE_ICONS.get(t, '')} {t.capitalize()}")
        c1, c2, c3 = st.columns(3)
        day = c1.date_input("Date", value=(start or now_local()).date())
        t_start = c2.time_input("Start", value=(start or default_hour).time())
        t_end = c3.time_input("End", value=(end or default_hour + timedelta(hours=1)).time())
        submitted = st.form_submit_button("💾 Save" if task else "➕ Create task", use_container_width=True)
    return submitted, {"title": title, "description": description, "type": ttype,
                       "day": day, "start": t_start.strftime("%H:%M"), "end": t_end.strftime("%H:%M")}

def render_calendar_tab(USER_ID: str):
    st.header("📅 Smart Calendar")
    svc = get_task_service()

    c1, c2 = st.columns([1, 1])
    with c1:
        view = st.radio("View", ["Week", "Day"], horizontal=True, key="cal_view")
    with c2:
        pick = st.date_input("Date", value=now_local().date(), key="cal_date")

    try:
        tasks = svc.list_week(USER_ID, pick) if view == "Week" else svc.list_day(USER_ID, pick)
    except PyMongoError as e:
        st.error(f"Failed to load tasks: {e}")
        return

    if view == "Week":
        mon = monday_of(pick)
        st.caption(f"Week of **{mon.isoformat()} → {(mon + timedelta(days=6)).isoformat()}**")
    else:
        st.caption(f"**{pick.isoformat()}**")

    if not tasks:
        st.info("No tasks scheduled. Create one below.")
    current_day = None
    for t in tasks:
        start = to_local_display(t["start_time"])
        end = to_local_display(t["end_time"])
        if view == "Week" and start.date() != current_day:
            current_day = start.date()
            st.markdown(f"**{current_day.strftime('%a %d %b')}**")
        row = st.columns([0.08, 0.62, 0.1, 0.1, 0.1])
        row[0].write(TASK_TYPE_ICONS.get(t.get("type"), "•"))
        title = f"~~{t['title']}~~" if t.get("completed") else t["title"]
        row[1].markdown(f"{title}  \n<small>{start.strftime('%H:%M')}–{end.strftime('%H:%M')} · "
                        f"{t.get('description') or ''}</small>", unsafe_allow_html=True)
        if row[2].button("↩️" if t.get("completed") else "✅", key=f"tgl_{t['_id']}",
                         help="Mark incomplete" if t.get("completed") else "Mark complete"):
            try:
                done = svc.toggle_completion(USER_ID, t["_id"])
            except (TaskNotFoundError, PyMongoError) as e:
                st.error(f"Failed to update task: {e}")
            else:
                st.cache_data.clear()
                st.toast("Task completed!" if done else "Task marked as incomplete")
                st.rerun()
        if row[3].button("✏️", key=f"edit_{t['_id']}", help="Edit"):
            st.session_state["cal_editing"] = t["_id"]
            st.rerun()
        if row[4].button("🗑️", key=f"del_{t['_id']}", help="Delete"):
            try:
                svc.delete_task(USER_ID, t["_id"])
            except (TaskNotFoundError, PyMongoError) as e:
                st.error(f"Failed to delete task: {e}")
            else:
                st.toast("Task deleted")
                st.rerun()

    st.divider()
    editing_id = st.session_state.get("cal_editing")
    editing = next((t for t in tasks if t["_id"] == editing_id), None)
    if editing:
        st.subheader("✏️ Edit task")
        submitted, v = _task_form("edit_task_form", editing)
        if st.button("Cancel edit"):
            st.session_state.pop("cal_editing", None)
            st.rerun()
        if submitted:
            try:
                start, end = build_task_window(v["day"], v["start"], v["end"])
                svc.update_task(USER_ID, editing["_id"], v["title"], v["type"], start, end, v["description"])
            except TaskValidationError as e:
                st.error(str(e))
            except (TaskNotFoundError, PyMongoError) as e:
                st.error(f"Failed to update task: {e}")
            else:
                st.session_state.pop("cal_editing", None)
                st.success("Task updated")
                st.rerun()
    else:
        st.subheader("➕ New task")
        submitted, v = _task_form("new_task_form")
        if submitted:
            try:
                start, end = build_task_window(v["day"], v["start"], v["end"])
                svc.create_task(USER_ID, v["title"], v["type"], start, end, v["description"])
            except TaskValidationError as e:
                st.error(str(e))
            except PyMongoError as e:
                st.error(f"Create failed: {e}")
            else:
                st.success("Task created")
                st.rerun()

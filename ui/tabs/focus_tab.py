# ui/tabs/focus_tab.py
import time
import streamlit as st
from pymongo.errors import PyMongoError

from core.constants import STATUS_FOCUS
from core.time_utils import now_local, day_window, today_iso, to_local_display
from services.timer_service import (
    PomodoroState, TimerError, apply_strategy, interval_duration, pause, remaining, reset,
)
from ui.components.assistant_panel import render_assistant_panel
from ui.components.sound import play_finish_sound
from ui.deps import get_pomodoro_service, get_repos

def get_timer_state() -> PomodoroState:
    if "pomodoro" not in st.session_state:
        st.session_state.pomodoro = PomodoroState()
    return st.session_state.pomodoro

def _finish(USER_ID: str, state: PomodoroState, manual: bool) -> bool:
    was_break = state.is_break
    try:
        minutes = get_pomodoro_service().finish(USER_ID, state, now_local(), manual=manual)
    except PyMongoError as e:
        st.error(f"Failed to save session: {e}")
        return False
    st.session_state["beep_once"] = True
    st.cache_data.clear()
    if was_break:
        st.toast("Break over. Ready for the next focus block.", icon="🎯")
    elif minutes is not None:
        st.toast(f"Pomodoro logged: {minutes} min of focus.", icon="🍅")
    return True

def tick_if_running(USER_ID: str):
    """Drive the countdown. Call last in the script: it sleeps and reruns."""
    state = get_timer_state()
    if not state.is_running:
        return
    if remaining(state) <= 0:
        if _finish(USER_ID, state, manual=False):
            st.rerun()
        return
    time.sleep(1)
    st.rerun()

def _render_countdown(state: PomodoroState):
    total = max(int(state.interval_total if state.current_session_id else interval_duration(state)), 1)
    left = remaining(state)
    pct_done = min(max((total - left) / total, 0.0), 1.0)
    label = state.status if state.is_break else (state.task or STATUS_FOCUS)
    st.markdown(
        f"""
        <div style="font-size:1.1rem;margin-bottom:0.25rem;">⏳ <b>{state.status}</b> · {label}</div>
        <div style="font-size:3rem;font-weight:700;letter-spacing:1px;">{left // 60:02d}:{left % 60:02d}</div>
        """, unsafe_allow_html=True
    )
    st.progress(pct_done, text=f"Cycle {state.cycle_count} completed")

def render_focus_tab(USER_ID: str):
    st.header("🍅 AI Focus")
    state = get_timer_state()
    st.toggle("🔊 Sound", value=st.session_state.get("sound_on", True), key="sound_on",
              help="Play a sound when an interval completes.")
    play_finish_sound()

    left, right = st.columns([1, 1])
    with left:
        st.subheader("🎯 Today’s goal")
        state.daily_goal = st.text_input("Daily goal", value=state.daily_goal,
                                         placeholder="What do you want to get done today?")
        if state.strategy:
            s = state.strategy
            st.info(f"**{s.name}** · {s.work_duration // 60}/{s.break_duration // 60} min\n\n"
                    f"{s.description}\n\n💡 {s.technique}")
            if st.button("Clear strategy", disabled=state.is_running):
                apply_strategy(state, None)
                st.rerun()

        st.divider()
        st.subheader("⏳ Timer")
        if not state.is_break:
            state.task = st.text_input("Task", value=state.task, disabled=state.is_running,
                                       placeholder="Describe what you are working on")
        _render_countdown(state)

        c1, c2, c3 = st.columns(3)
        if not state.is_running:
            if c1.button("▶️ Start", use_container_width=True):
                try:
                    get_pomodoro_service().start(USER_ID, state, now_local())
                except TimerError as e:
                    st.error(str(e))
                except PyMongoError as e:
                    st.error(f"Failed to start session: {e}")
                else:
                    st.rerun()
        else:
            if c1.button("⏸️ Pause", use_container_width=True):
                pause(state)
                st.rerun()
        if c2.button("🔄 Reset", use_container_width=True):
            reset(state)
            st.rerun()
        if c3.button("✅ Complete now", use_container_width=True,
                     disabled=state.current_session_id is None):
            if _finish(USER_ID, state, manual=True):
                st.rerun()

    with right:
        render_assistant_panel(state)

    st.divider()
    st.subheader("📝 Today’s Sessions")
    _, _, sessions_repo = get_repos()
    start, end = day_window(today_iso())
    todays = sessions_repo.list_in_window(USER_ID, start, end)
    if not todays:
        st.info("No sessions yet today.")
    else:
        st.dataframe([{
            "When": to_local_display(s.get("started_at")).strftime("%H:%M"),
            "Mode": s.get("mode"),
            "Task": s.get("task_name") or "—",
            "Planned (min)": int(s.get("duration", 0)) // 60,
            "Actual (min)": (int(s["actual_seconds"]) // 60) if s.get("actual_seconds") is not None else "—",
            "Done": "✓" if s.get("completed") else "—",
        } for s in todays], use_container_width=True, hide_index=True)

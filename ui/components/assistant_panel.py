# ui/components/assistant_panel.py
import streamlit as st

from services.assistant_service import AssistantError
from services.timer_service import PomodoroState, apply_strategy, remaining
from ui.deps import get_assistant

QUICK_PROMPTS = [
    "Recommend a strategy for today's goal",
    "Break my task into steps",
    "Should I take a break now?",
]

def _send(state: PomodoroState, text: str) -> bool:
    history = st.session_state.setdefault("assistant_messages", [])
    history.append({"role": "user", "content": text})
    try:
        with st.spinner("Thinking…"):
            reply = get_assistant().reply(
                history, task=state.task or state.daily_goal,
                time_left=remaining(state), cycle_count=state.cycle_count,
            )
    except AssistantError as e:
        history.pop()
        st.error(e.message)
        return False
    history.append({"role": "assistant", "content": reply.content})
    if reply.strategy:
        apply_strategy(state, reply.strategy)
        st.toast(f"Strategy set: {reply.strategy.name} "
                 f"({reply.strategy.work_duration // 60}/{reply.strategy.break_duration // 60} min)", icon="🎯")
    return True

def render_assistant_panel(state: PomodoroState):
    st.subheader("✨ AI Focus Assistant")
    history = st.session_state.setdefault("assistant_messages", [])
    box = st.container(height=360)
    with box:
        if not history:
            st.caption("Ask for a focus strategy, a task breakdown or break advice.")
        for m in history:
            with st.chat_message(m["role"]):
                st.markdown(m["content"])

    cols = st.columns(len(QUICK_PROMPTS))
    for col, prompt in zip(cols, QUICK_PROMPTS):
        if col.button(prompt, use_container_width=True, key=f"qp_{prompt}"):
            if _send(state, prompt):
                st.rerun()

    with st.form("assistant_form", clear_on_submit=True):
        text = st.text_input("Message", placeholder="e.g. prepare a speech for Friday")
        sent = st.form_submit_button("Send", use_container_width=True)
    if sent and text.strip():
        if _send(state, text.strip()):
            st.rerun()

# ui/components/sound.py
import streamlit as st
from core.config import FINISH_SOUND_URL

def play_finish_sound():
    """Once per finished interval; the focus tab sets `beep_once`."""
    if not st.session_state.get("beep_once"):
        return
    st.session_state["beep_once"] = False
    if not st.session_state.get("sound_on", True):
        return
    st.audio(FINISH_SOUND_URL, autoplay=True)

# core/config.py
import os
from typing import Any, Optional

import streamlit as st


def _setting(name: str, default: Optional[Any] = None) -> Optional[Any]:
    """st.secrets first, then the environment, then the default."""
    try:
        val = st.secrets.get(name)
    except Exception:
        # no secrets.toml (tests, scripts)
        val = None
    if val is None or (isinstance(val, str) and not val.strip()):
        val = os.getenv(name)
    if val is None or (isinstance(val, str) and not val.strip()):
        return default
    return val.strip() if isinstance(val, str) else val


def _int_setting(name: str, default: int) -> int:
    try:
        return int(_setting(name, default))
    except (TypeError, ValueError):
        return default


APP_TITLE = "Focus Studio"
PAGE_ICON = "🍅"

MONGO_URI = _setting("MONGO_URI", "")
DB_NAME = _setting("DB_NAME", "Focus_Studio")
USER_ID = _setting("USER_ID", "default")
TIMEZONE = _setting("TIMEZONE", "UTC")

# Pomodoro cycle
WORK_MINUTES = _int_setting("WORK_MINUTES", 25)
SHORT_BREAK_MINUTES = _int_setting("SHORT_BREAK_MINUTES", 5)
LONG_BREAK_MINUTES = _int_setting("LONG_BREAK_MINUTES", 15)
LONG_BREAK_EVERY = max(1, _int_setting("LONG_BREAK_EVERY", 4))

# LLM gateway (OpenAI-compatible)
LLM_API_KEY = _setting("LLM_API_KEY")
LLM_BASE_URL = _setting("LLM_BASE_URL", "https://ai.gateway.lovable.dev/v1")
LLM_MODEL = _setting("LLM_MODEL", "google/gemini-2.5-flash")
LLM_TIMEOUT = _int_setting("LLM_TIMEOUT", 30)

LOG_LEVEL = str(_setting("LOG_LEVEL", "INFO")).upper()
LOG_FILE = _setting("LOG_FILE")

FINISH_SOUND_URL = _setting(
    "FINISH_SOUND_URL",
    "https://actions.google.com/sounds/v1/alarms/beep_short.ogg",
)

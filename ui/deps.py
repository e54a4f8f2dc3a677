# ui/deps.py
import streamlit as st

from core.db import get_db
from data_access.stats_repo import StatsRepo
from data_access.tasks_repo import TasksRepo
from data_access.sessions_repo import SessionsRepo
from services.ai_client import get_ai_client
from services.assistant_service import FocusAssistant
from services.task_service import TaskService
from services.timer_service import PomodoroService

@st.cache_resource
def get_repos():
    db = get_db()
    return StatsRepo(db), TasksRepo(db), SessionsRepo(db)

def get_task_service() -> TaskService:
    stats, tasks, _ = get_repos()
    return TaskService(tasks, stats)

def get_pomodoro_service() -> PomodoroService:
    stats, tasks, sessions = get_repos()
    return PomodoroService(stats, tasks, sessions)

@st.cache_resource
def get_llm():
    return get_ai_client()

def get_assistant() -> FocusAssistant:
    return FocusAssistant(get_llm())

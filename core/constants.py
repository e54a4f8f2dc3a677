# core/constants.py
TASK_TYPES = ("work", "meeting", "personal", "learning")

TASK_TYPE_ICONS = {
    "work": "💼",
    "meeting": "👥",
    "personal": "🏠",
    "learning": "📚",
}

TASK_TYPE_COLORS = {
    "work": "#8b5cf6",
    "meeting": "#06b6d4",
    "personal": "#10b981",
    "learning": "#f59e0b",
}
DEFAULT_TYPE_COLOR = "#64748b"

STATUS_FOCUS = "Focus Time"
STATUS_SHORT_BREAK = "Short Break"
STATUS_LONG_BREAK = "Long Break"

INSIGHT_TYPES = ("success", "info", "warning", "primary")

# collections
STATS_COLLECTION = "user_stats"
TASKS_COLLECTION = "tasks"
SESSIONS_COLLECTION = "pomodoro_sessions"

# services/timer_service.py
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from core.config import WORK_MINUTES, SHORT_BREAK_MINUTES, LONG_BREAK_MINUTES, LONG_BREAK_EVERY
from core.constants import STATUS_FOCUS, STATUS_SHORT_BREAK, STATUS_LONG_BREAK
from core.time_utils import LOCAL_TZ, now_local, to_utc_naive
from services.efficiency import update_daily_efficiency

WORK_DURATION = WORK_MINUTES * 60
SHORT_BREAK = SHORT_BREAK_MINUTES * 60
LONG_BREAK = LONG_BREAK_MINUTES * 60


class TimerError(Exception):
    pass


@dataclass
class FocusStrategy:
    """Work/break rhythm recommended by the assistant. Durations in seconds."""
    name: str
    work_duration: int
    break_duration: int
    description: str = ""
    technique: str = ""

    @classmethod
    def from_minutes(cls, name: str, work_minutes: float, break_minutes: float,
                     description: str = "", technique: str = "") -> "FocusStrategy":
        return cls(name=name, work_duration=int(round(float(work_minutes) * 60)),
                   break_duration=int(round(float(break_minutes) * 60)),
                   description=description, technique=technique)


@dataclass
class PomodoroState:
    task: str = ""
    time_left: int = WORK_DURATION
    is_running: bool = False
    is_break: bool = False
    cycle_count: int = 0
    status: str = STATUS_FOCUS
    current_session_id: Optional[str] = None
    daily_goal: str = ""
    strategy: Optional[FocusStrategy] = None
    end_ts: Optional[datetime] = None
    interval_total: int = field(default=WORK_DURATION)


def work_duration(state: PomodoroState) -> int:
    if state.strategy and state.strategy.work_duration > 0:
        return state.strategy.work_duration
    return WORK_DURATION


def break_duration(state: PomodoroState, cycle_count: int) -> int:
    if state.strategy and state.strategy.break_duration > 0:
        return state.strategy.break_duration
    return LONG_BREAK if is_long_break(cycle_count) else SHORT_BREAK


def is_long_break(cycle_count: int) -> bool:
    return cycle_count > 0 and cycle_count % LONG_BREAK_EVERY == 0


def interval_duration(state: PomodoroState) -> int:
    return break_duration(state, state.cycle_count) if state.is_break else work_duration(state)


def remaining(state: PomodoroState, now: Optional[datetime] = None) -> int:
    """Seconds left in the current interval."""
    if not state.is_running or state.end_ts is None:
        return max(0, int(state.time_left))
    now = now or now_local()
    return max(0, int(math.ceil((state.end_ts - now).total_seconds())))


def apply_strategy(state: PomodoroState, strategy: Optional[FocusStrategy]):
    state.strategy = strategy
    if not state.is_running and state.current_session_id is None and not state.is_break:
        state.time_left = work_duration(state)
        state.interval_total = state.time_left


def pause(state: PomodoroState, now: Optional[datetime] = None):
    state.time_left = remaining(state, now)
    state.is_running = False
    state.end_ts = None


def reset(state: PomodoroState):
    state.is_running = False
    state.is_break = False
    state.task = ""
    state.status = STATUS_FOCUS
    state.current_session_id = None
    state.end_ts = None
    state.time_left = work_duration(state)
    state.interval_total = state.time_left


def advance(state: PomodoroState):
    """Move to the next interval after one finishes; the next one waits for start()."""
    if state.is_break:
        state.is_break = False
        state.status = STATUS_FOCUS
        state.time_left = work_duration(state)
    else:
        state.cycle_count += 1
        state.is_break = True
        state.time_left = break_duration(state, state.cycle_count)
        state.status = STATUS_LONG_BREAK if is_long_break(state.cycle_count) else STATUS_SHORT_BREAK
    state.task = ""
    state.current_session_id = None
    state.end_ts = None
    state.interval_total = state.time_left


def _local(now: datetime) -> datetime:
    return LOCAL_TZ.localize(now) if now.tzinfo is None else now.astimezone(LOCAL_TZ)


class PomodoroService:
    """Persists timer transitions: session rows, daily stats and the efficiency recompute."""

    def __init__(self, stats_repo, tasks_repo, sessions_repo):
        self.stats_repo = stats_repo
        self.tasks_repo = tasks_repo
        self.sessions_repo = sessions_repo

    def start(self, user_id: str, state: PomodoroState, now: Optional[datetime] = None) -> str:
        if state.is_running:
            return state.current_session_id
        if not state.is_break and not state.task.strip():
            raise TimerError("Please describe your task before starting.")
        now = _local(now or now_local())

        if state.current_session_id is None:
            duration = interval_duration(state)
            if state.time_left <= 0 or state.time_left > duration:
                state.time_left = duration
            state.interval_total = duration
            state.current_session_id = self.sessions_repo.start(
                user_id, to_utc_naive(now), duration,
                "Break" if state.is_break else state.task.strip(),
                "break" if state.is_break else "work",
            )
        # else: resuming a paused interval, same session row

        state.end_ts = now + timedelta(seconds=int(state.time_left))
        state.is_running = True
        return state.current_session_id

    def finish(self, user_id: str, state: PomodoroState, now: Optional[datetime] = None,
               manual: bool = False) -> Optional[int]:
        """
        Close the current interval: timer hit zero, or "complete now" when manual.

        Work intervals add their focused minutes and one pomodoro to today's
        stats and recompute the efficiency score. Returns the minutes recorded
        (None for breaks and for a state with nothing in progress, so repeated
        calls for the same interval do nothing).
        """
        if state.current_session_id is None:
            return None
        now = _local(now or now_local())

        left = remaining(state, now) if manual else 0
        state.time_left = left
        state.is_running = False
        state.end_ts = None
        elapsed = max(0, int(state.interval_total) - left)

        self.sessions_repo.complete(user_id, state.current_session_id, to_utc_naive(now), elapsed)

        focus_min = None
        if not state.is_break:
            focus_min = int(math.floor(elapsed / 60 + 0.5))
            day = now.date().isoformat()
            self.stats_repo.add_pomodoro(user_id, day, focus_min)
            update_daily_efficiency(self.stats_repo, self.tasks_repo, user_id, today=day)

        advance(state)
        return focus_min

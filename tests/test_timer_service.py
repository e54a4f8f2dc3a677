from datetime import datetime, timedelta

import pytest
import pytz

from core.constants import STATUS_FOCUS, STATUS_LONG_BREAK, STATUS_SHORT_BREAK
from core.config import LONG_BREAK_EVERY
from services.efficiency import calculate_efficiency
from services.timer_service import (
    LONG_BREAK,
    SHORT_BREAK,
    WORK_DURATION,
    FocusStrategy,
    PomodoroService,
    PomodoroState,
    TimerError,
    apply_strategy,
    is_long_break,
    pause,
    remaining,
    reset,
)

UID = "u1"
T0 = pytz.UTC.localize(datetime(2025, 3, 10, 9, 0, 0))


@pytest.fixture
def service(stats_repo, tasks_repo, sessions_repo):
    return PomodoroService(stats_repo, tasks_repo, sessions_repo)


@pytest.fixture
def state():
    return PomodoroState(task="Write report")


def test_start_requires_a_task(service):
    with pytest.raises(TimerError):
        service.start(UID, PomodoroState(task="  "), T0)


def test_start_opens_a_session(service, state, sessions_repo):
    sid = service.start(UID, state, T0)
    assert state.is_running
    assert state.current_session_id == sid
    assert state.end_ts == T0 + timedelta(seconds=WORK_DURATION)
    row = sessions_repo.docs[sid]
    assert row["mode"] == "work"
    assert row["task_name"] == "Write report"
    assert row["duration"] == WORK_DURATION
    assert row["started_at"] == datetime(2025, 3, 10, 9, 0, 0)


def test_countdown_uses_wall_clock(service, state):
    service.start(UID, state, T0)
    assert remaining(state, T0 + timedelta(seconds=90)) == WORK_DURATION - 90
    assert remaining(state, T0 + timedelta(hours=2)) == 0


def test_pause_and_resume_keep_the_session(service, state, sessions_repo):
    sid = service.start(UID, state, T0)
    pause(state, T0 + timedelta(minutes=10))
    assert not state.is_running
    assert state.time_left == WORK_DURATION - 600

    later = T0 + timedelta(minutes=30)
    assert service.start(UID, state, later) == sid
    assert len(sessions_repo.docs) == 1
    assert state.end_ts == later + timedelta(seconds=WORK_DURATION - 600)


def test_finish_work_interval_records_stats(service, state, stats_repo, sessions_repo):
    sid = service.start(UID, state, T0)
    minutes = service.finish(UID, state, T0 + timedelta(seconds=WORK_DURATION))

    assert minutes == WORK_DURATION // 60
    row = stats_repo.get_day(UID, "2025-03-10")
    assert row["pomodoro_sessions"] == 1
    assert row["focus_time"] == minutes
    assert row["efficiency_score"] == calculate_efficiency(
        tasks_completed=0, pomodoro_sessions=1, focus_time_minutes=minutes)
    assert sessions_repo.docs[sid]["completed"] is True
    assert sessions_repo.docs[sid]["actual_seconds"] == WORK_DURATION

    assert state.is_break
    assert state.cycle_count == 1
    assert state.status == STATUS_SHORT_BREAK
    assert state.time_left == SHORT_BREAK
    assert state.task == ""
    assert state.current_session_id is None
    assert not state.is_running


def test_finish_is_edge_triggered(service, state, stats_repo):
    service.start(UID, state, T0)
    end = T0 + timedelta(seconds=WORK_DURATION)
    service.finish(UID, state, end)
    assert service.finish(UID, state, end) is None
    assert stats_repo.get_day(UID, "2025-03-10")["pomodoro_sessions"] == 1


def test_complete_now_records_elapsed_minutes(service, state, stats_repo, sessions_repo):
    sid = service.start(UID, state, T0)
    minutes = service.finish(UID, state, T0 + timedelta(minutes=10), manual=True)
    assert minutes == 10
    assert sessions_repo.docs[sid]["actual_seconds"] == 600
    assert stats_repo.get_day(UID, "2025-03-10")["focus_time"] == 10


def test_break_does_not_touch_stats(service, state, stats_repo):
    service.start(UID, state, T0)
    service.finish(UID, state, T0 + timedelta(seconds=WORK_DURATION))
    before = stats_repo.get_day(UID, "2025-03-10")

    start = T0 + timedelta(minutes=30)
    service.start(UID, state, start)
    assert service.finish(UID, state, start + timedelta(seconds=SHORT_BREAK)) is None

    assert stats_repo.get_day(UID, "2025-03-10")["pomodoro_sessions"] == before["pomodoro_sessions"]
    assert not state.is_break
    assert state.status == STATUS_FOCUS
    assert state.time_left == WORK_DURATION
    assert state.cycle_count == 1


def test_long_break_every_nth_cycle(service, state):
    state.cycle_count = LONG_BREAK_EVERY - 1
    service.start(UID, state, T0)
    service.finish(UID, state, T0 + timedelta(seconds=WORK_DURATION))
    assert state.cycle_count == LONG_BREAK_EVERY
    assert state.status == STATUS_LONG_BREAK
    assert state.time_left == LONG_BREAK


def test_is_long_break():
    assert not is_long_break(0)
    assert is_long_break(LONG_BREAK_EVERY)
    assert not is_long_break(LONG_BREAK_EVERY + 1)


def test_strategy_overrides_durations(service, state):
    strategy = FocusStrategy.from_minutes("Deep Work Blocks", 50, 10)
    apply_strategy(state, strategy)
    assert state.time_left == 50 * 60

    service.start(UID, state, T0)
    assert state.end_ts == T0 + timedelta(minutes=50)
    service.finish(UID, state, T0 + timedelta(minutes=50))
    assert state.time_left == 10 * 60


def test_reset_clears_the_interval(service, state):
    service.start(UID, state, T0)
    reset(state)
    assert not state.is_running
    assert state.current_session_id is None
    assert state.task == ""
    assert state.time_left == WORK_DURATION

from datetime import datetime

from services import analytics_service as an

TODAY = "2025-03-12"  # a Wednesday


def day(date, focus=0, tasks=0, poms=0, eff=0):
    return {"date": date, "focus_time": focus, "tasks_completed": tasks,
            "pomodoro_sessions": poms, "efficiency_score": eff}


class TestStreak:
    def test_counts_consecutive_active_days(self):
        stats = [day("2025-03-12", poms=1), day("2025-03-11", tasks=1), day("2025-03-10", focus=5)]
        assert an.current_streak(stats, TODAY) == 3

    def test_may_end_yesterday(self):
        stats = [day("2025-03-11", poms=1), day("2025-03-10", poms=1)]
        assert an.current_streak(stats, TODAY) == 2

    def test_broken_when_latest_is_older(self):
        assert an.current_streak([day("2025-03-10", poms=3)], TODAY) == 0

    def test_stops_at_gap(self):
        stats = [day("2025-03-12", poms=1), day("2025-03-10", poms=1)]
        assert an.current_streak(stats, TODAY) == 1

    def test_stops_at_idle_day(self):
        stats = [day("2025-03-12", poms=1), day("2025-03-11"), day("2025-03-10", poms=1)]
        assert an.current_streak(stats, TODAY) == 1

    def test_empty(self):
        assert an.current_streak([], TODAY) == 0


def test_weekly_focus_hours_covers_monday_to_sunday():
    stats = [day("2025-03-10", focus=90), day("2025-03-16", focus=30), day("2025-03-17", focus=600)]
    week = an.weekly_focus_hours(stats, TODAY)
    assert [w["day"] for w in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert week[0]["hours"] == 1.5
    assert week[6]["hours"] == 0.5
    assert sum(w["hours"] for w in week) == 2.0


def test_category_breakdown_sorted_with_colors():
    tasks = [{"type": "work"}, {"type": "meeting"}, {"type": "work"}, {"type": None}]
    rows = an.category_breakdown(tasks)
    assert [(r["type"], r["value"]) for r in rows][0] == ("work", 2)
    assert {r["type"] for r in rows} == {"work", "meeting", "other"}
    assert all(r["color"].startswith("#") for r in rows)


def test_monthly_progress_last_six_months():
    stats = [day("2025-03-01", focus=120, eff=80), day("2025-03-05", focus=60, eff=61),
             day("2025-01-15", focus=30, eff=40)]
    months = an.monthly_progress(stats, TODAY)
    assert [m["month"] for m in months] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert months[-1] == {"month": "Mar", "month_start": "2025-03-01", "focus": 3, "efficiency": 71}
    assert months[3]["focus"] == 1
    assert months[4]["focus"] == 0 and months[4]["efficiency"] == 0


def test_overall_summary():
    stats = [day("2025-03-12", focus=90, tasks=2, poms=3, eff=50), day("2025-03-11", focus=60, tasks=1, eff=41)]
    assert an.overall_summary(stats, TODAY) == {
        "total_focus_hours": 3, "tasks_completed": 3, "efficiency": 46, "streak": 2,
    }


def test_overall_summary_empty():
    assert an.overall_summary([], TODAY) == {
        "total_focus_hours": 0, "tasks_completed": 0, "efficiency": 0, "streak": 0,
    }


def test_completion_rate():
    assert an.completion_rate([]) == 0
    assert an.completion_rate([{"completed": True}, {"completed": False}, {}]) == 33


def test_most_productive_hours_prefers_earlier_hour_on_ties():
    sessions = [{"started_at": datetime(2025, 3, 10, h)} for h in (14, 9, 9, 14, 16, 8)]
    assert an.most_productive_hours(sessions) == [9, 14, 8]
    assert an.most_productive_hours([]) == []


def test_build_insights_summary():
    stats = [day("2025-03-12", focus=120, tasks=2, poms=4, eff=70), day("2025-03-11", focus=60, tasks=1, poms=2, eff=50)]
    tasks = [{"type": "work", "completed": True}, {"type": "learning", "completed": False}]
    sessions = [{"started_at": datetime(2025, 3, 12, 10)}]
    summary = an.build_insights_summary(stats, tasks, sessions, recent_days=1)
    assert summary["total_focus_hours"] == 3
    assert summary["total_tasks"] == 3
    assert summary["avg_efficiency"] == 60
    assert summary["total_pomodoros"] == 6
    assert summary["completion_rate"] == 50
    assert summary["tasks_by_type"] == {"work": 1, "learning": 1}
    assert summary["most_productive_hours"] == [10]
    assert summary["recent_days"] == [
        {"date": "2025-03-12", "focus_time": 120, "tasks_completed": 2, "efficiency": 70},
    ]


def test_today_overview_counts_planned_tasks_live(stats_repo, tasks_repo):
    stats_repo.seed("u1", TODAY, tasks_completed=1, pomodoro_sessions=3, focus_time=75, efficiency_score=40)
    for hour in (9, 14):
        tasks_repo.insert("u1", {"title": "t", "type": "work",
                                 "start_time": datetime(2025, 3, 12, hour),
                                 "end_time": datetime(2025, 3, 12, hour + 1)})
    tasks_repo.insert("u1", {"title": "later", "type": "work",
                             "start_time": datetime(2025, 3, 13, 9), "end_time": datetime(2025, 3, 13, 10)})
    assert an.today_overview(stats_repo, tasks_repo, "u1", TODAY) == {
        "efficiency": 40, "pomodoros": 3, "focus_time": 75, "tasks_completed": 1, "tasks_planned": 2,
    }
    assert "tasks_planned" not in stats_repo.get_day("u1", TODAY)


def test_today_overview_without_row(stats_repo, tasks_repo):
    assert an.today_overview(stats_repo, tasks_repo, "u1", TODAY) is None

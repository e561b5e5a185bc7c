# tests/test_dashboard.py
from datetime import datetime, timedelta

from study_hub.dashboard import get_level_color, get_streak_color, get_study_stats, get_subject_stats
from study_hub.tracker import add_goal, add_resource, log_session, review_resource, update_goal_status


def test_level_color():
    assert get_level_color(1) == "blue"
    assert get_level_color(3) == "cyan"
    assert get_level_color(5) == "green"
    assert get_level_color(12) == "magenta"


def test_streak_color():
    assert get_streak_color(0) == "red"
    assert get_streak_color(1) == "dark_orange"
    assert get_streak_color(3) == "yellow"
    assert get_streak_color(7) == "green"


def test_study_stats_empty(tmp_db, today):
    stats = get_study_stats(tmp_db, today=today)
    assert stats == {
        "sessions_logged": 0,
        "minutes_studied": 0,
        "resources": 0,
        "resources_done": 0,
        "goals_completed": 0,
        "resources_due": 0,
    }


def test_study_stats_with_data(tmp_db, today):
    log_session(tmp_db, 25, started_at=datetime(2024, 3, 15, 9), today=today)
    log_session(tmp_db, 40, started_at=datetime(2024, 3, 14, 9), today=today)
    resource, _ = add_resource(tmp_db, "Due soon")
    review_resource(tmp_db, resource.id, today=today - timedelta(days=3))
    goal = add_goal(tmp_db, "Goal")
    update_goal_status(tmp_db, goal.id, "completed")
    stats = get_study_stats(tmp_db, today=today)
    assert stats["sessions_logged"] == 2
    assert stats["minutes_studied"] == 65
    assert stats["resources"] == 1
    assert stats["goals_completed"] == 1
    assert stats["resources_due"] == 1


def test_subject_stats(tmp_db, today):
    log_session(tmp_db, 30, started_at=datetime(2024, 3, 14, 9), subject="Math", today=today)
    log_session(tmp_db, 15, started_at=datetime(2024, 3, 15, 18), subject="Math", today=today)
    add_resource(tmp_db, "Calculus", subject="Math")
    add_resource(tmp_db, "Sketching", subject="Art")
    goal = add_goal(tmp_db, "Draw daily", subject="Art")
    update_goal_status(tmp_db, goal.id, "completed")

    stats = {s.name: s for s in get_subject_stats(tmp_db)}
    assert list(stats) == ["Art", "Math"]
    assert stats["Math"].total_study_minutes == 45
    assert stats["Math"].total_resources == 1
    assert stats["Math"].last_studied == datetime(2024, 3, 15, 18)
    assert stats["Art"].total_study_minutes == 0
    assert stats["Art"].completed_goals == 1
    assert stats["Art"].last_studied is None

import pytest
from unittest.mock import patch

from study_hub.app import (
    SessionExitRequested, cmd_goal, cmd_log, cmd_review, cmd_subject, session_int_prompt, session_prompt,
)
from study_hub.seed import seed_template_subjects
from study_hub.subjects import add_subject, list_subjects
from study_hub.tracker import add_goal, add_resource, get_progress, get_resource, list_goals, list_sessions


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("study_hub.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("study_hub.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("study_hub.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_session_prompt_reprompts_on_invalid_choice():
    with patch("study_hub.app.Prompt.ask", side_effect=["maybe", "add"]):
        assert session_prompt("action", choices=["add", "update"]) == "add"


def test_session_int_prompt_raises_on_q():
    with patch("study_hub.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("rate", choices=["1", "2", "3", "4", "5"])


def test_session_int_prompt_returns_normal_input():
    with patch("study_hub.app.Prompt.ask", side_effect=["abc", "3"]):
        assert session_int_prompt("rate") == 3


def test_cmd_log_records_session(tmp_db):
    with patch("study_hub.app.Prompt.ask", side_effect=["25", "Math"]):
        cmd_log(tmp_db)
    sessions = list_sessions(tmp_db)
    assert len(sessions) == 1
    assert sessions[0].subject == "Math"
    assert get_progress(tmp_db).xp == 10


def test_cmd_goal_completes_goal(tmp_db):
    add_goal(tmp_db, "Finish book")
    with patch("study_hub.app.Prompt.ask", side_effect=["update", "1", "completed"]):
        cmd_goal(tmp_db)
    assert list_goals(tmp_db)[0].status == "completed"
    assert get_progress(tmp_db).xp == 10


def test_cmd_review_falls_back_to_unreviewed(tmp_db):
    resource, _ = add_resource(tmp_db, "Book")
    with patch("study_hub.app.Prompt.ask", side_effect=["1"]):
        cmd_review(tmp_db)
    assert get_resource(tmp_db, resource.id).review_status == "reviewing"


def test_cmd_goal_sets_progress(tmp_db):
    add_goal(tmp_db, "Finish book")
    with patch("study_hub.app.Prompt.ask", side_effect=["progress", "1", "60"]):
        cmd_goal(tmp_db)
    goal = list_goals(tmp_db)[0]
    assert goal.progress_pct == 60
    assert goal.status == "active"
    assert get_progress(tmp_db).xp == 0


def test_cmd_subject_from_template(tmp_db):
    seed_template_subjects(tmp_db)
    # templates list by name, so 1 is Business
    with patch("study_hub.app.Prompt.ask", side_effect=["template", "1", "Accounting"]):
        cmd_subject(tmp_db)
    custom = list_subjects(tmp_db, templates=False)
    assert [s.name for s in custom] == ["Accounting"]
    assert custom[0].description.startswith("Economics")


def test_cmd_subject_delete(tmp_db):
    add_subject(tmp_db, "Temp")
    with patch("study_hub.app.Prompt.ask", side_effect=["delete", "1"]):
        cmd_subject(tmp_db)
    assert list_subjects(tmp_db) == []

"""Tests for data model classes."""
from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from study_hub.models import Goal, LearningResource, ProgressState, StudySession, Subject, XPGain


def test_session_creation():
    s = StudySession(id="s1", started_at=datetime(2024, 3, 15, 9), duration_minutes=25)
    assert s.duration_minutes == 25
    assert s.subject is None
    assert s.resource_id is None


def test_resource_defaults():
    r = LearningResource(id="r1", title="Book")
    assert r.review_status == "new"
    assert r.priority == 3
    assert r.next_review_date is None
    assert r.last_review_interval_days is None
    assert r.favorite is False


def test_goal_defaults():
    g = Goal(id="g1", name="Pass exam")
    assert g.status == "active"
    assert g.progress_pct == 0


def test_progress_defaults():
    p = ProgressState()
    assert (p.xp, p.level, p.current_streak_days, p.longest_streak_days) == (0, 1, 0, 0)


def test_xp_gain_is_immutable():
    gain = XPGain(5, "reason")
    with pytest.raises(FrozenInstanceError):
        gain.amount = 10


def test_subject_defaults():
    s = Subject(id="sub1", name="Japanese")
    assert s.is_template is False
    assert s.total_study_minutes == 0
    assert s.last_studied is None

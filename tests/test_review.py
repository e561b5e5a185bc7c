# tests/test_review.py
import time
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from study_hub.models import LearningResource, ReviewResult
from study_hub.review import (
    REVIEW_INTERVALS, calculate_review_progression, calculate_snooze_date, format_review_date,
    get_days_until_review, get_due_resources, get_next_review_text, get_review_progress,
    get_status_color, is_due_today,
)


def make_resource(**overrides) -> LearningResource:
    return LearningResource(id="r1", title="Test Resource", **overrides)


def apply(resource: LearningResource, result: ReviewResult) -> LearningResource:
    return replace(
        resource,
        review_status=result.review_status,
        next_review_date=result.next_review_date,
        last_review_interval_days=result.last_review_interval_days,
    )


def test_review_intervals():
    assert REVIEW_INTERVALS == (3, 7, 14, 30)


# --- Progression ---

@pytest.mark.parametrize("status", ["new", "learning"])
def test_first_review_starts_ladder(status, today):
    result = calculate_review_progression(make_resource(review_status=status), today=today)
    assert result == ReviewResult("reviewing", today + timedelta(days=3), 3)

@pytest.mark.parametrize("current,following", [(3, 7), (7, 14), (14, 30)])
def test_reviewing_climbs_ladder(current, following, today):
    resource = make_resource(review_status="reviewing", last_review_interval_days=current)
    result = calculate_review_progression(resource, today=today)
    assert result.review_status == "reviewing"
    assert result.last_review_interval_days == following
    assert result.next_review_date == today + timedelta(days=following)

def test_last_rung_marks_done(today):
    resource = make_resource(review_status="reviewing", last_review_interval_days=30,
                             next_review_date=today)
    result = calculate_review_progression(resource, today=today)
    assert result == ReviewResult("done", None, 30)

@pytest.mark.parametrize("interval", [None, 5, 0, 100])
def test_unknown_interval_treated_as_first_rung(interval, today):
    resource = make_resource(review_status="reviewing", last_review_interval_days=interval)
    result = calculate_review_progression(resource, today=today)
    assert result.last_review_interval_days == 7
    assert result.next_review_date == today + timedelta(days=7)

def test_done_is_unchanged(today):
    resource = make_resource(review_status="done", last_review_interval_days=30)
    assert calculate_review_progression(resource, today=today) == ReviewResult("done", None, 30)

def test_full_ladder_round_trip(today):
    resource = make_resource()
    intervals = []
    for _ in range(4):
        resource = apply(resource, calculate_review_progression(resource, today=today))
        intervals.append(resource.last_review_interval_days)
    assert intervals == [3, 7, 14, 30]
    assert resource.review_status == "reviewing"

    resource = apply(resource, calculate_review_progression(resource, today=today))
    assert resource.review_status == "done"
    assert resource.next_review_date is None

    again = apply(resource, calculate_review_progression(resource, today=today))
    assert again == resource

def test_progression_does_not_mutate_input(today):
    resource = make_resource(review_status="reviewing", last_review_interval_days=7)
    calculate_review_progression(resource, today=today)
    assert resource.last_review_interval_days == 7
    assert resource.next_review_date is None


# --- Snooze ---

def test_snooze_adds_one_day_to_review_date(today):
    resource = make_resource(review_status="reviewing", next_review_date=date(2024, 2, 29))
    assert calculate_snooze_date(resource, today=today) == date(2024, 3, 1)

def test_snooze_without_date_uses_today(today):
    assert calculate_snooze_date(make_resource(), today=today) == today + timedelta(days=1)

def test_snooze_done_resource(today):
    resource = make_resource(review_status="done")
    assert calculate_snooze_date(resource, today=today) == today + timedelta(days=1)


# --- Due checks ---

@pytest.mark.parametrize("offset", [0, -1, -30])
def test_due_today_or_past(offset, today):
    resource = make_resource(review_status="reviewing", next_review_date=today + timedelta(days=offset))
    assert is_due_today(resource, today=today)

def test_not_due_in_future(today):
    resource = make_resource(review_status="reviewing", next_review_date=today + timedelta(days=1))
    assert not is_due_today(resource, today=today)

def test_done_never_due(today):
    resource = make_resource(review_status="done", next_review_date=today - timedelta(days=3))
    assert not is_due_today(resource, today=today)

def test_unscheduled_not_due(today):
    assert not is_due_today(make_resource(), today=today)

def test_due_with_datetime_later_today(today):
    resource = make_resource(review_status="reviewing",
                             next_review_date=datetime(today.year, today.month, today.day, 23, 0))
    assert is_due_today(resource, today=today)

def test_get_due_resources_filters(today):
    due = make_resource(review_status="reviewing", next_review_date=today)
    later = replace(due, id="r2", next_review_date=today + timedelta(days=2))
    done = replace(due, id="r3", review_status="done")
    assert get_due_resources([due, later, done], today=today) == [due]


# --- Days until review ---

def test_days_until_review(today):
    resource = make_resource(review_status="reviewing", next_review_date=today + timedelta(days=7))
    assert get_days_until_review(resource, today=today) == 7

def test_days_until_review_overdue(today):
    resource = make_resource(review_status="reviewing", next_review_date=today - timedelta(days=2))
    assert get_days_until_review(resource, today=today) == -2

def test_days_until_review_hours_into_tomorrow(today):
    tomorrow = today + timedelta(days=1)
    resource = make_resource(review_status="reviewing",
                             next_review_date=datetime(tomorrow.year, tomorrow.month, tomorrow.day, 5))
    assert get_days_until_review(resource, today=today) == 1

def test_days_until_review_none_when_done_or_unset(today):
    assert get_days_until_review(make_resource(review_status="done", next_review_date=today), today=today) is None
    assert get_days_until_review(make_resource(), today=today) is None


# --- Display helpers ---

def test_format_review_date(today):
    def fmt(offset):
        return format_review_date(make_resource(review_status="reviewing",
                                                next_review_date=today + timedelta(days=offset)), today=today)
    assert fmt(-1) == "Overdue"
    assert fmt(0) == "Due today"
    assert fmt(1) == "Due tomorrow"
    assert fmt(5) == "Due in 5 days"
    assert format_review_date(make_resource(review_status="done"), today=today) == ""

def test_next_review_text():
    assert get_next_review_text(make_resource()) == "First review in 3 days"
    assert get_next_review_text(make_resource(review_status="reviewing", last_review_interval_days=7)) == "Next review in 14 days"
    assert get_next_review_text(make_resource(review_status="reviewing", last_review_interval_days=30)) == "Final review - will mark as done"
    assert get_next_review_text(make_resource(review_status="done")) == "Completed"

def test_review_progress():
    assert get_review_progress(make_resource()) == 0
    assert get_review_progress(make_resource(review_status="learning")) == 25
    assert get_review_progress(make_resource(review_status="reviewing", last_review_interval_days=3)) == 43.75
    assert get_review_progress(make_resource(review_status="reviewing", last_review_interval_days=30)) == 100
    assert get_review_progress(make_resource(review_status="done")) == 100


@pytest.fixture
def utc_local_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_aware_review_date_uses_local_day(utc_local_time, today):
    # 05:00 on the 16th at UTC+14 is 15:00 UTC on the 15th
    when = datetime(2024, 3, 16, 5, tzinfo=timezone(timedelta(hours=14)))
    resource = make_resource(review_status="reviewing", next_review_date=when, last_review_interval_days=3)
    assert get_days_until_review(resource, today) == 0
    assert is_due_today(resource, today)
    assert calculate_snooze_date(resource, today) == today + timedelta(days=1)


def test_status_color():
    assert get_status_color("new") == "grey62"
    assert get_status_color("learning") == "blue"
    assert get_status_color("reviewing") == "yellow"
    assert get_status_color("done") == "green"
    assert get_status_color("unknown") == "white"

"""Spaced repetition review scheduling for learning resources.

Resources climb a fixed ladder of review intervals (3 -> 7 -> 14 -> 30 days)
and are marked done after the 30-day review.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from study_hub.models import LearningResource, ReviewResult

REVIEW_INTERVALS = (3, 7, 14, 30)

STATUS_COLORS = {
    "new": "grey62",
    "learning": "blue",
    "reviewing": "yellow",
    "done": "green",
}


def _as_day(value) -> date:
    # aware datetimes count on the local calendar day, as session days do
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def _ladder_index(interval: Optional[int]) -> int:
    """Rung index for an interval; missing or unknown intervals count as the first rung."""
    if interval in REVIEW_INTERVALS:
        return REVIEW_INTERVALS.index(interval)
    return 0


def calculate_review_progression(resource: LearningResource, today: Optional[date] = None) -> ReviewResult:
    """Next review state after the resource has been reviewed."""
    today = today or date.today()

    if resource.review_status in ("new", "learning"):
        first = REVIEW_INTERVALS[0]
        return ReviewResult("reviewing", today + timedelta(days=first), first)

    if resource.review_status == "reviewing":
        index = _ladder_index(resource.last_review_interval_days)
        if index == len(REVIEW_INTERVALS) - 1:
            return ReviewResult("done", None, REVIEW_INTERVALS[index])
        interval = REVIEW_INTERVALS[index + 1]
        return ReviewResult("reviewing", today + timedelta(days=interval), interval)

    # done is terminal
    return ReviewResult(
        resource.review_status,
        resource.next_review_date,
        resource.last_review_interval_days,
    )


def calculate_snooze_date(resource: LearningResource, today: Optional[date] = None) -> date:
    """Push the next review back by one day, starting from today if none is set."""
    base = resource.next_review_date or today or date.today()
    return _as_day(base) + timedelta(days=1)


def is_due_today(resource: LearningResource, today: Optional[date] = None) -> bool:
    if resource.next_review_date is None or resource.review_status == "done":
        return False
    today = today or date.today()
    return _as_day(resource.next_review_date) <= today


def get_due_resources(resources: Iterable[LearningResource], today: Optional[date] = None) -> list[LearningResource]:
    return [r for r in resources if is_due_today(r, today)]


def get_days_until_review(resource: LearningResource, today: Optional[date] = None) -> Optional[int]:
    """Calendar days until the next review (any time tomorrow counts as 1). None when done or unscheduled."""
    if resource.next_review_date is None or resource.review_status == "done":
        return None
    today = today or date.today()
    return (_as_day(resource.next_review_date) - today).days


def get_next_review_text(resource: LearningResource) -> str:
    if resource.review_status == "done":
        return "Completed"
    if resource.review_status in ("new", "learning"):
        return f"First review in {REVIEW_INTERVALS[0]} days"
    if resource.review_status == "reviewing":
        index = _ladder_index(resource.last_review_interval_days)
        if index == len(REVIEW_INTERVALS) - 1:
            return "Final review - will mark as done"
        return f"Next review in {REVIEW_INTERVALS[index + 1]} days"
    return ""


def format_review_date(resource: LearningResource, today: Optional[date] = None) -> str:
    days = get_days_until_review(resource, today)
    if days is None:
        return ""
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    return f"Due in {days} days"


def get_review_progress(resource: LearningResource) -> float:
    """Percentage (0-100) of the way through the review ladder."""
    if resource.review_status == "learning":
        return 25.0
    if resource.review_status == "done":
        return 100.0
    if resource.review_status == "reviewing":
        # 25% for entering review, then 18.75% per rung
        return 25 + (_ladder_index(resource.last_review_interval_days) + 1) * 18.75
    return 0.0


def get_status_color(status: str) -> str:
    """Rich color name for a review status badge."""
    return STATUS_COLORS.get(status, "white")

"""Data classes for the study hub domain model."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

RESOURCE_TYPES = ("video", "article", "book", "course", "podcast", "other")
REVIEW_STATUSES = ("new", "learning", "reviewing", "done")
GOAL_STATUSES = ("active", "completed", "paused", "cancelled")


@dataclass
class StudySession:
    id: str
    started_at: datetime
    duration_minutes: int
    subject: Optional[str] = None
    resource_id: Optional[str] = None


@dataclass
class LearningResource:
    id: str
    title: str
    url: str = ""
    subject: str = ""
    type: str = "other"
    priority: int = 3  # 1 = highest
    notes: str = ""
    favorite: bool = False
    review_status: str = "new"
    next_review_date: Optional[date] = None
    last_review_interval_days: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Goal:
    id: str
    name: str
    subject: str = ""
    due_date: Optional[date] = None
    progress_pct: int = 0
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ProgressState:
    xp: int = 0
    level: int = 1
    current_streak_days: int = 0
    longest_streak_days: int = 0


@dataclass(frozen=True)
class XPGain:
    amount: int
    reason: str


@dataclass(frozen=True)
class LevelInfo:
    level: int
    current_xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    progress_to_next: float  # 0-1


@dataclass(frozen=True)
class StreakInfo:
    current_streak: int = 0
    longest_streak: int = 0


@dataclass(frozen=True)
class ReviewResult:
    review_status: str
    next_review_date: Optional[date] = None
    last_review_interval_days: Optional[int] = None


@dataclass
class SubjectStats:
    name: str
    total_study_minutes: int = 0
    total_resources: int = 0
    completed_resources: int = 0
    total_goals: int = 0
    completed_goals: int = 0
    last_studied: Optional[datetime] = None


@dataclass
class Subject:
    """A study subject. Templates are read-only starting points for custom subjects."""
    id: str
    name: str
    description: str = ""
    color: str = "#6B7280"
    is_template: bool = False
    # stats refreshed by subjects.update_subject_stats; templates keep zeros
    total_study_minutes: int = 0
    total_resources: int = 0
    completed_resources: int = 0
    total_goals: int = 0
    completed_goals: int = 0
    last_studied: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

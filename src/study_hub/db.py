"""Database initialization, connection management and row conversion."""
import os
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from study_hub.models import Goal, LearningResource, ProgressState, StudySession, Subject

DEFAULT_DB_PATH = os.environ.get("STUDY_HUB_DB", str(Path.home() / ".study_hub" / "hub.db"))

SCHEMA = """
CREATE TABLE IF NOT EXISTS resources (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    url TEXT NOT NULL DEFAULT '',
    subject TEXT NOT NULL DEFAULT '',
    type TEXT NOT NULL DEFAULT 'other'
        CHECK (type IN ('video', 'article', 'book', 'course', 'podcast', 'other')),
    priority INTEGER NOT NULL DEFAULT 3 CHECK (priority BETWEEN 1 AND 5),
    notes TEXT DEFAULT '',
    favorite INTEGER DEFAULT 0 CHECK (favorite IN (0, 1)),
    review_status TEXT NOT NULL DEFAULT 'new'
        CHECK (review_status IN ('new', 'learning', 'reviewing', 'done')),
    next_review_date TEXT,
    interval_days INTEGER,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    started_at TEXT NOT NULL,
    duration_min INTEGER NOT NULL CHECK (duration_min >= 0),
    subject TEXT,
    resource_id TEXT REFERENCES resources(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    subject TEXT NOT NULL DEFAULT '',
    due_date TEXT,
    progress_pct INTEGER NOT NULL DEFAULT 0 CHECK (progress_pct BETWEEN 0 AND 100),
    status TEXT NOT NULL DEFAULT 'active'
        CHECK (status IN ('active', 'completed', 'paused', 'cancelled')),
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS settings (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    xp INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
    level INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
    streak INTEGER NOT NULL DEFAULT 0 CHECK (streak >= 0),
    longest_streak INTEGER NOT NULL DEFAULT 0 CHECK (longest_streak >= 0)
);

CREATE TABLE IF NOT EXISTS subjects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT DEFAULT '',
    color TEXT NOT NULL DEFAULT '#6B7280',
    is_template INTEGER NOT NULL DEFAULT 0 CHECK (is_template IN (0, 1)),
    total_study_minutes INTEGER NOT NULL DEFAULT 0 CHECK (total_study_minutes >= 0),
    total_resources INTEGER NOT NULL DEFAULT 0,
    completed_resources INTEGER NOT NULL DEFAULT 0,
    total_goals INTEGER NOT NULL DEFAULT 0,
    completed_goals INTEGER NOT NULL DEFAULT 0,
    last_studied TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_resources_next_review_date ON resources(next_review_date);
CREATE INDEX IF NOT EXISTS idx_resources_subject ON resources(subject);
CREATE INDEX IF NOT EXISTS idx_sessions_started_at ON sessions(started_at);
CREATE INDEX IF NOT EXISTS idx_goals_status ON goals(status);

INSERT OR IGNORE INTO settings (id) VALUES (1);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def write_transaction(db_path: str = DEFAULT_DB_PATH):
    """Yield a connection holding the database write lock from its first statement.

    Reads made through it see no concurrent writes. Commits on success,
    rolls back on any exception and always closes.
    """
    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _date(value: str | None) -> date | None:
    # tolerate rows written with a time component
    return date.fromisoformat(value[:10]) if value else None


def _datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def row_to_session(row: sqlite3.Row) -> StudySession:
    return StudySession(
        id=row["id"],
        started_at=datetime.fromisoformat(row["started_at"]),
        duration_minutes=row["duration_min"],
        subject=row["subject"],
        resource_id=row["resource_id"],
    )


def row_to_resource(row: sqlite3.Row) -> LearningResource:
    return LearningResource(
        id=row["id"],
        title=row["title"],
        url=row["url"],
        subject=row["subject"],
        type=row["type"],
        priority=row["priority"],
        notes=row["notes"] or "",
        favorite=bool(row["favorite"]),
        review_status=row["review_status"],
        next_review_date=_date(row["next_review_date"]),
        last_review_interval_days=row["interval_days"],
        created_at=_datetime(row["created_at"]),
        updated_at=_datetime(row["updated_at"]),
    )


def row_to_goal(row: sqlite3.Row) -> Goal:
    return Goal(
        id=row["id"],
        name=row["name"],
        subject=row["subject"],
        due_date=_date(row["due_date"]),
        progress_pct=row["progress_pct"],
        status=row["status"],
        created_at=_datetime(row["created_at"]),
        updated_at=_datetime(row["updated_at"]),
    )


def row_to_progress(row: sqlite3.Row) -> ProgressState:
    return ProgressState(
        xp=row["xp"],
        level=row["level"],
        current_streak_days=row["streak"],
        longest_streak_days=row["longest_streak"],
    )


def session_params(s: StudySession) -> tuple:
    return (s.id, _iso(s.started_at), s.duration_minutes, s.subject, s.resource_id)


def resource_params(r: LearningResource) -> tuple:
    return (
        r.id, r.title, r.url, r.subject, r.type, r.priority, r.notes, int(r.favorite),
        r.review_status, _iso(r.next_review_date), r.last_review_interval_days,
        _iso(r.created_at), _iso(r.updated_at),
    )


def goal_params(g: Goal) -> tuple:
    return (
        g.id, g.name, g.subject, _iso(g.due_date), g.progress_pct, g.status,
        _iso(g.created_at), _iso(g.updated_at),
    )


INSERT_SESSION = (
    "INSERT INTO sessions (id, started_at, duration_min, subject, resource_id) VALUES (?, ?, ?, ?, ?)"
)
INSERT_RESOURCE = (
    """INSERT INTO resources (id, title, url, subject, type, priority, notes, favorite,
    review_status, next_review_date, interval_days, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"""
)
INSERT_GOAL = (
    """INSERT INTO goals (id, name, subject, due_date, progress_pct, status, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)"""
)


def row_to_subject(row: sqlite3.Row) -> Subject:
    return Subject(
        id=row["id"],
        name=row["name"],
        description=row["description"] or "",
        color=row["color"],
        is_template=bool(row["is_template"]),
        total_study_minutes=row["total_study_minutes"],
        total_resources=row["total_resources"],
        completed_resources=row["completed_resources"],
        total_goals=row["total_goals"],
        completed_goals=row["completed_goals"],
        last_studied=_datetime(row["last_studied"]),
        created_at=_datetime(row["created_at"]),
        updated_at=_datetime(row["updated_at"]),
    )


def subject_params(s: Subject) -> tuple:
    return (
        s.id, s.name, s.description, s.color, int(s.is_template),
        s.total_study_minutes, s.total_resources, s.completed_resources,
        s.total_goals, s.completed_goals, _iso(s.last_studied),
        _iso(s.created_at), _iso(s.updated_at),
    )


INSERT_SUBJECT = (
    """INSERT INTO subjects (id, name, description, color, is_template, total_study_minutes,
    total_resources, completed_resources, total_goals, completed_goals, last_studied,
    created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"""
)

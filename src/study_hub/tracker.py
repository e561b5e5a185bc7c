"""Study event handling: persists sessions, resources and goals and applies XP, streak and review updates."""
import logging
import uuid
from dataclasses import replace
from datetime import date, datetime

from study_hub.db import (
    INSERT_GOAL, INSERT_RESOURCE, INSERT_SESSION, get_connection, goal_params,
    resource_params, row_to_goal, row_to_progress, row_to_resource, row_to_session,
    session_params, write_transaction,
)
from study_hub.models import Goal, LearningResource, ProgressState, StudySession, XPGain
from study_hub.review import calculate_review_progression, calculate_snooze_date, is_due_today
from study_hub.xp import (
    apply_streak, apply_xp, calculate_goal_completion_xp, calculate_level,
    calculate_resource_xp, calculate_session_xp, calculate_streak,
)

logger = logging.getLogger(__name__)

RESOURCE_FIELDS = {
    "title", "url", "subject", "type", "priority", "notes", "favorite",
    "review_status", "next_review_date", "last_review_interval_days",
}
GOAL_FIELDS = {"name", "subject", "due_date", "progress_pct", "status"}


def generate_id() -> str:
    return uuid.uuid4().hex


def _log_gain(gain: XPGain, progress: ProgressState) -> None:
    info = calculate_level(progress.xp)
    logger.info("+%d XP: %s", gain.amount, gain.reason)
    logger.info("Level %d (%d%% to next)", info.level, round(info.progress_to_next * 100))


def _read_progress(conn) -> ProgressState:
    return row_to_progress(conn.execute("SELECT * FROM settings WHERE id = 1").fetchone())


def _write_progress(conn, progress: ProgressState) -> None:
    conn.execute(
        "UPDATE settings SET xp = ?, level = ?, streak = ?, longest_streak = ? WHERE id = 1",
        (progress.xp, progress.level, progress.current_streak_days, progress.longest_streak_days),
    )


def get_progress(db_path: str) -> ProgressState:
    conn = get_connection(db_path)
    progress = _read_progress(conn)
    conn.close()
    return progress


def save_progress(db_path: str, progress: ProgressState) -> ProgressState:
    """Persist a progress state, forcing level to agree with xp."""
    progress = replace(progress, level=calculate_level(progress.xp).level)
    with write_transaction(db_path) as conn:
        _write_progress(conn, progress)
    return progress


# --- Sessions ---


def list_sessions(db_path: str) -> list[StudySession]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM sessions ORDER BY started_at DESC").fetchall()
    conn.close()
    return [row_to_session(r) for r in rows]


def log_session(
    db_path: str,
    duration_minutes: int,
    started_at: datetime | None = None,
    subject: str | None = None,
    resource_id: str | None = None,
    today: date | None = None,
) -> tuple[StudySession, XPGain, ProgressState]:
    """Save a study session, grant its XP and recompute the streak."""
    session = StudySession(
        id=generate_id(),
        started_at=started_at or datetime.now(),
        duration_minutes=max(0, duration_minutes),
        subject=subject,
        resource_id=resource_id,
    )
    gain = calculate_session_xp(session.duration_minutes)

    with write_transaction(db_path) as conn:
        conn.execute(INSERT_SESSION, session_params(session))
        sessions = [row_to_session(r) for r in conn.execute("SELECT * FROM sessions").fetchall()]
        streak = calculate_streak(sessions, today=today)
        progress = apply_streak(apply_xp(_read_progress(conn), gain), streak)
        _write_progress(conn, progress)

    if gain.amount > 0:
        _log_gain(gain, progress)
    logger.debug("Streak %d (longest %d)", progress.current_streak_days, progress.longest_streak_days)
    return session, gain, progress


def refresh_streak(db_path: str, today: date | None = None) -> ProgressState:
    """Recompute the current streak, e.g. after a day without study."""
    with write_transaction(db_path) as conn:
        sessions = [row_to_session(r) for r in conn.execute("SELECT * FROM sessions").fetchall()]
        progress = apply_streak(_read_progress(conn), calculate_streak(sessions, today=today))
        _write_progress(conn, progress)
    return progress


# --- Resources ---


def _fetch_resource(conn, resource_id: str) -> LearningResource | None:
    row = conn.execute("SELECT * FROM resources WHERE id = ?", (resource_id,)).fetchone()
    return row_to_resource(row) if row else None


def get_resource(db_path: str, resource_id: str) -> LearningResource | None:
    conn = get_connection(db_path)
    resource = _fetch_resource(conn, resource_id)
    conn.close()
    return resource


def list_resources(db_path: str, subject: str | None = None) -> list[LearningResource]:
    conn = get_connection(db_path)
    if subject:
        rows = conn.execute(
            "SELECT * FROM resources WHERE subject = ? ORDER BY priority, created_at", (subject,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM resources ORDER BY priority, created_at").fetchall()
    conn.close()
    return [row_to_resource(r) for r in rows]


def add_resource(
    db_path: str,
    title: str,
    url: str = "",
    subject: str = "",
    type: str = "other",
    priority: int = 3,
    notes: str = "",
    favorite: bool = False,
    grant_xp: bool = True,
) -> tuple[LearningResource, XPGain | None]:
    """Save a new resource; priority 1 resources earn XP."""
    now = datetime.now()
    resource = LearningResource(
        id=generate_id(), title=title, url=url, subject=subject, type=type,
        priority=priority, notes=notes, favorite=favorite,
        created_at=now, updated_at=now,
    )
    gain = calculate_resource_xp(priority) if grant_xp else None

    with write_transaction(db_path) as conn:
        conn.execute(INSERT_RESOURCE, resource_params(resource))
        if gain:
            progress = apply_xp(_read_progress(conn), gain)
            _write_progress(conn, progress)

    if gain:
        _log_gain(gain, progress)
    return resource, gain


def _save_resource(conn, resource: LearningResource) -> None:
    conn.execute(
        """UPDATE resources SET title=?, url=?, subject=?, type=?, priority=?, notes=?, favorite=?,
        review_status=?, next_review_date=?, interval_days=?, created_at=?, updated_at=?
        WHERE id=?""",
        resource_params(resource)[1:] + (resource.id,),
    )


def update_resource(db_path: str, resource_id: str, **updates) -> LearningResource | None:
    """Apply field edits to a resource. Unknown field names raise TypeError."""
    unknown = set(updates) - RESOURCE_FIELDS
    if unknown:
        raise TypeError(f"Unknown resource fields: {', '.join(sorted(unknown))}")
    with write_transaction(db_path) as conn:
        resource = _fetch_resource(conn, resource_id)
        if resource is None:
            return None
        resource = replace(resource, **updates, updated_at=datetime.now())
        _save_resource(conn, resource)
    return resource


def delete_resource(db_path: str, resource_id: str) -> bool:
    with write_transaction(db_path) as conn:
        deleted = conn.execute("DELETE FROM resources WHERE id = ?", (resource_id,)).rowcount
    return deleted > 0


def review_resource(db_path: str, resource_id: str, today: date | None = None) -> LearningResource | None:
    """Mark a resource as reviewed and move it along the review ladder."""
    with write_transaction(db_path) as conn:
        resource = _fetch_resource(conn, resource_id)
        if resource is None:
            return None
        result = calculate_review_progression(resource, today=today)
        resource = replace(
            resource,
            review_status=result.review_status,
            next_review_date=result.next_review_date,
            last_review_interval_days=result.last_review_interval_days,
            updated_at=datetime.now(),
        )
        _save_resource(conn, resource)
    logger.info("Reviewed '%s': %s", resource.title, resource.review_status)
    return resource


def snooze_resource(db_path: str, resource_id: str, today: date | None = None) -> LearningResource | None:
    with write_transaction(db_path) as conn:
        resource = _fetch_resource(conn, resource_id)
        if resource is None:
            return None
        resource = replace(
            resource,
            next_review_date=calculate_snooze_date(resource, today=today),
            updated_at=datetime.now(),
        )
        _save_resource(conn, resource)
    logger.info("Snoozed '%s' until %s", resource.title, resource.next_review_date)
    return resource


def get_due_resources(db_path: str, today: date | None = None) -> list[LearningResource]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM resources
        WHERE review_status != 'done' AND next_review_date IS NOT NULL
        ORDER BY next_review_date ASC, priority ASC"""
    ).fetchall()
    conn.close()
    return [r for r in map(row_to_resource, rows) if is_due_today(r, today=today)]


# --- Goals ---


def get_goal(db_path: str, goal_id: str) -> Goal | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM goals WHERE id = ?", (goal_id,)).fetchone()
    conn.close()
    return row_to_goal(row) if row else None


def list_goals(db_path: str, status: str | None = None) -> list[Goal]:
    conn = get_connection(db_path)
    if status:
        rows = conn.execute("SELECT * FROM goals WHERE status = ? ORDER BY due_date", (status,)).fetchall()
    else:
        rows = conn.execute("SELECT * FROM goals ORDER BY due_date").fetchall()
    conn.close()
    return [row_to_goal(r) for r in rows]


def add_goal(
    db_path: str,
    name: str,
    subject: str = "",
    due_date: date | None = None,
    progress_pct: int = 0,
) -> Goal:
    now = datetime.now()
    goal = Goal(
        id=generate_id(), name=name, subject=subject, due_date=due_date,
        progress_pct=progress_pct, created_at=now, updated_at=now,
    )
    with write_transaction(db_path) as conn:
        conn.execute(INSERT_GOAL, goal_params(goal))
    return goal


def update_goal(db_path: str, goal_id: str, **updates) -> tuple[Goal, XPGain | None] | None:
    """Apply field edits to a goal. Moving into completed from another status earns XP.

    Unknown field names raise TypeError. Returns None if the goal is missing.
    """
    unknown = set(updates) - GOAL_FIELDS
    if unknown:
        raise TypeError(f"Unknown goal fields: {', '.join(sorted(unknown))}")
    with write_transaction(db_path) as conn:
        row = conn.execute("SELECT * FROM goals WHERE id = ?", (goal_id,)).fetchone()
        if row is None:
            return None
        goal = row_to_goal(row)
        gain = None
        if updates.get("status") == "completed" and goal.status != "completed":
            gain = calculate_goal_completion_xp()
        goal = replace(goal, **updates, updated_at=datetime.now())
        conn.execute(
            """UPDATE goals SET name=?, subject=?, due_date=?, progress_pct=?, status=?,
            created_at=?, updated_at=? WHERE id=?""",
            goal_params(goal)[1:] + (goal.id,),
        )
        if gain:
            progress = apply_xp(_read_progress(conn), gain)
            _write_progress(conn, progress)

    if gain:
        _log_gain(gain, progress)
    return goal, gain


def update_goal_status(db_path: str, goal_id: str, status: str) -> tuple[Goal, XPGain | None] | None:
    """Change a goal's status; the transition into completed earns XP once."""
    return update_goal(db_path, goal_id, status=status)


def delete_goal(db_path: str, goal_id: str) -> bool:
    with write_transaction(db_path) as conn:
        deleted = conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,)).rowcount
    return deleted > 0

"""Progress dashboard statistics and display helpers."""
from datetime import date, datetime

from study_hub.db import get_connection
from study_hub.models import SubjectStats
from study_hub.tracker import get_due_resources


def get_level_color(level: int) -> str:
    if level >= 10:
        return "magenta"
    elif level >= 5:
        return "green"
    elif level >= 3:
        return "cyan"
    return "blue"


def get_streak_color(streak: int) -> str:
    if streak >= 7:
        return "green"
    elif streak >= 3:
        return "yellow"
    elif streak >= 1:
        return "dark_orange"
    return "red"


def get_subject_stats(db_path: str) -> list[SubjectStats]:
    """Per-subject totals across sessions, resources and goals, sorted by name."""
    conn = get_connection(db_path)
    subjects = conn.execute(
        """SELECT subject FROM resources WHERE subject != ''
        UNION SELECT subject FROM goals WHERE subject != ''
        UNION SELECT subject FROM sessions WHERE subject IS NOT NULL AND subject != ''
        ORDER BY subject"""
    ).fetchall()
    results = [subject_totals(conn, row["subject"]) for row in subjects]
    conn.close()
    return results


def subject_totals(conn, name: str) -> SubjectStats:
    """Totals for one subject name, read through an open connection."""
    sessions = conn.execute(
        "SELECT COALESCE(SUM(duration_min), 0) AS minutes, MAX(started_at) AS last FROM sessions WHERE subject = ?",
        (name,),
    ).fetchone()
    resources = conn.execute(
        """SELECT COUNT(*) AS t, SUM(CASE WHEN review_status = 'done' THEN 1 ELSE 0 END) AS c
        FROM resources WHERE subject = ?""",
        (name,),
    ).fetchone()
    goals = conn.execute(
        """SELECT COUNT(*) AS t, SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END) AS c
        FROM goals WHERE subject = ?""",
        (name,),
    ).fetchone()
    return SubjectStats(
        name=name,
        total_study_minutes=sessions["minutes"],
        total_resources=resources["t"],
        completed_resources=resources["c"] or 0,
        total_goals=goals["t"],
        completed_goals=goals["c"] or 0,
        last_studied=datetime.fromisoformat(sessions["last"]) if sessions["last"] else None,
    )


def get_study_stats(db_path: str, today: date | None = None) -> dict:
    conn = get_connection(db_path)
    sessions = conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
    minutes = conn.execute("SELECT COALESCE(SUM(duration_min), 0) FROM sessions").fetchone()[0]
    resources = conn.execute("SELECT COUNT(*) FROM resources").fetchone()[0]
    done = conn.execute("SELECT COUNT(*) FROM resources WHERE review_status = 'done'").fetchone()[0]
    goals_done = conn.execute("SELECT COUNT(*) FROM goals WHERE status = 'completed'").fetchone()[0]
    conn.close()
    return {
        "sessions_logged": sessions,
        "minutes_studied": minutes,
        "resources": resources,
        "resources_done": done,
        "goals_completed": goals_done,
        "resources_due": len(get_due_resources(db_path, today=today)),
    }

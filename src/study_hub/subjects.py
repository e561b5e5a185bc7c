"""Subject management: custom subjects, read-only templates and persisted per-subject stats."""
import logging
from dataclasses import replace
from datetime import datetime

from study_hub.dashboard import subject_totals
from study_hub.db import INSERT_SUBJECT, get_connection, row_to_subject, subject_params, write_transaction
from study_hub.models import Subject
from study_hub.tracker import generate_id

logger = logging.getLogger(__name__)

SUBJECT_FIELDS = {"name", "description", "color"}
STAT_FIELDS = (
    "total_study_minutes", "total_resources", "completed_resources",
    "total_goals", "completed_goals", "last_studied",
)


def _fetch_subject(conn, subject_id: str) -> Subject | None:
    row = conn.execute("SELECT * FROM subjects WHERE id = ?", (subject_id,)).fetchone()
    return row_to_subject(row) if row else None


def _save_subject(conn, subject: Subject) -> None:
    conn.execute(
        """UPDATE subjects SET name=?, description=?, color=?, is_template=?, total_study_minutes=?,
        total_resources=?, completed_resources=?, total_goals=?, completed_goals=?, last_studied=?,
        created_at=?, updated_at=? WHERE id=?""",
        subject_params(subject)[1:] + (subject.id,),
    )


def get_subject(db_path: str, subject_id: str) -> Subject | None:
    conn = get_connection(db_path)
    subject = _fetch_subject(conn, subject_id)
    conn.close()
    return subject


def list_subjects(db_path: str, templates: bool | None = None) -> list[Subject]:
    """All subjects by name; pass templates=True/False to filter on template flag."""
    conn = get_connection(db_path)
    if templates is None:
        rows = conn.execute("SELECT * FROM subjects ORDER BY name").fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM subjects WHERE is_template = ? ORDER BY name", (int(templates),)
        ).fetchall()
    conn.close()
    return [row_to_subject(r) for r in rows]


def add_subject(db_path: str, name: str, description: str = "", color: str = "#6B7280") -> Subject:
    now = datetime.now()
    subject = Subject(
        id=generate_id(), name=name, description=description, color=color,
        created_at=now, updated_at=now,
    )
    with write_transaction(db_path) as conn:
        conn.execute(INSERT_SUBJECT, subject_params(subject))
    logger.info("Added subject '%s'", subject.name)
    return subject


def update_subject(db_path: str, subject_id: str, **updates) -> Subject | None:
    """Edit name, description or color. Unknown field names raise TypeError."""
    unknown = set(updates) - SUBJECT_FIELDS
    if unknown:
        raise TypeError(f"Unknown subject fields: {', '.join(sorted(unknown))}")
    with write_transaction(db_path) as conn:
        subject = _fetch_subject(conn, subject_id)
        if subject is None:
            return None
        subject = replace(subject, **updates, updated_at=datetime.now())
        _save_subject(conn, subject)
    return subject


def delete_subject(db_path: str, subject_id: str) -> bool:
    """Delete a custom subject. Templates and missing ids return False."""
    with write_transaction(db_path) as conn:
        deleted = conn.execute(
            "DELETE FROM subjects WHERE id = ? AND is_template = 0", (subject_id,)
        ).rowcount
    if not deleted:
        logger.debug("Subject %s not deleted (missing or template)", subject_id)
    return deleted > 0


def create_subject_from_template(db_path: str, template_id: str, name: str | None = None) -> Subject | None:
    """Copy a template into a new custom subject with zeroed stats. None if no such template."""
    now = datetime.now()
    with write_transaction(db_path) as conn:
        template = _fetch_subject(conn, template_id)
        if template is None or not template.is_template:
            return None
        subject = Subject(
            id=generate_id(),
            name=name or template.name,
            description=template.description,
            color=template.color,
            created_at=now,
            updated_at=now,
        )
        conn.execute(INSERT_SUBJECT, subject_params(subject))
    logger.info("Created subject '%s' from template '%s'", subject.name, template.name)
    return subject


def update_subject_stats(db_path: str) -> list[Subject]:
    """Recompute and store stats for every custom subject, matching records by subject name."""
    now = datetime.now()
    with write_transaction(db_path) as conn:
        subjects = [
            row_to_subject(r)
            for r in conn.execute("SELECT * FROM subjects WHERE is_template = 0 ORDER BY name").fetchall()
        ]
        updated = []
        for subject in subjects:
            totals = subject_totals(conn, subject.name)
            subject = replace(
                subject,
                updated_at=now,
                **{field: getattr(totals, field) for field in STAT_FIELDS},
            )
            _save_subject(conn, subject)
            updated.append(subject)
    return updated

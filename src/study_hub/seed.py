"""Seed the database with sample learning resources and subject templates."""
import json
import random
from pathlib import Path

from study_hub.db import INSERT_SUBJECT, get_connection, subject_params, write_transaction
from study_hub.models import Subject
from study_hub.tracker import add_resource

CONTENT_DIR = Path(__file__).parent / "content"


def load_sample_resources() -> list[dict]:
    return json.loads((CONTENT_DIR / "sample_resources.json").read_text())["resources"]


def get_sample_subjects() -> list[str]:
    return sorted({r["subject"] for r in load_sample_resources()})


def get_sample_resources_for_subject(subject: str) -> list[dict]:
    return [r for r in load_sample_resources() if r["subject"] == subject]


def get_random_sample_resources(count: int = 5) -> list[dict]:
    samples = load_sample_resources()
    return random.sample(samples, min(count, len(samples)))


def is_seeded(db_path: str) -> bool:
    """Check whether any resources exist yet."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM resources").fetchone()[0]
    conn.close()
    return count > 0


def seed_sample_resources(db_path: str, subject: str | None = None) -> int:
    """Add sample resources (optionally for one subject). Seeding never grants XP."""
    samples = get_sample_resources_for_subject(subject) if subject else load_sample_resources()
    conn = get_connection(db_path)
    existing = {row[0] for row in conn.execute("SELECT url FROM resources").fetchall()}
    conn.close()
    added = 0
    for sample in samples:
        if sample["url"] in existing:
            continue
        add_resource(db_path, grant_xp=False, **sample)
        added += 1
    return added


def load_subject_templates() -> list[Subject]:
    data = json.loads((CONTENT_DIR / "subject_templates.json").read_text())["subjects"]
    return [Subject(is_template=True, **t) for t in data]


def seed_template_subjects(db_path: str) -> int:
    """Insert any missing template subjects. Returns how many were added."""
    with write_transaction(db_path) as conn:
        existing = {row["id"] for row in conn.execute("SELECT id FROM subjects").fetchall()}
        missing = [t for t in load_subject_templates() if t.id not in existing]
        conn.executemany(INSERT_SUBJECT, [subject_params(t) for t in missing])
    return len(missing)

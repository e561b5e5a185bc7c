"""Backup export and import in JSON or YAML."""
import json
import logging
import sqlite3
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path

import yaml

from study_hub.db import (
    INSERT_GOAL, INSERT_RESOURCE, INSERT_SESSION, INSERT_SUBJECT, get_connection, goal_params,
    resource_params, row_to_goal, row_to_progress, row_to_resource, row_to_session,
    row_to_subject, session_params, subject_params, write_transaction,
)
from study_hub.models import Goal, LearningResource, ProgressState, StudySession, Subject
from study_hub.seed import load_subject_templates
from study_hub.xp import calculate_level

logger = logging.getLogger(__name__)


def _jsonable(record) -> dict:
    return {
        k: v.isoformat() if isinstance(v, (date, datetime)) else v
        for k, v in asdict(record).items()
    }


def _parse_dates(record: dict, date_fields=(), datetime_fields=()) -> dict:
    record = dict(record)
    for key in date_fields:
        if isinstance(record.get(key), str):
            record[key] = date.fromisoformat(record[key])
    for key in datetime_fields:
        if isinstance(record.get(key), str):
            record[key] = datetime.fromisoformat(record[key])
    return record


def export_data(db_path: str) -> dict:
    conn = get_connection(db_path)
    data = {
        "resources": [_jsonable(row_to_resource(r)) for r in conn.execute("SELECT * FROM resources")],
        "sessions": [_jsonable(row_to_session(r)) for r in conn.execute("SELECT * FROM sessions ORDER BY started_at")],
        "goals": [_jsonable(row_to_goal(r)) for r in conn.execute("SELECT * FROM goals")],
        "subjects": [_jsonable(row_to_subject(r)) for r in conn.execute("SELECT * FROM subjects ORDER BY name")],
        "settings": asdict(row_to_progress(conn.execute("SELECT * FROM settings WHERE id = 1").fetchone())),
    }
    conn.close()
    return data


def export_json(db_path: str) -> str:
    return json.dumps(export_data(db_path), indent=2)


def import_data(db_path: str, data: dict) -> dict:
    """Replace all stored records with those in a backup. Returns per-section counts.

    A backup without a subjects section gets the default subject templates.
    Anything that fails to parse or violates a table constraint raises
    ValueError and leaves the stored data untouched.
    """
    if not isinstance(data, dict):
        raise ValueError("Invalid backup format")
    try:
        resources = [
            LearningResource(**_parse_dates(r, ("next_review_date",), ("created_at", "updated_at")))
            for r in data.get("resources", [])
        ]
        sessions = [
            StudySession(**_parse_dates(s, datetime_fields=("started_at",)))
            for s in data.get("sessions", [])
        ]
        goals = [
            Goal(**_parse_dates(g, ("due_date",), ("created_at", "updated_at")))
            for g in data.get("goals", [])
        ]
        if "subjects" in data:
            subjects = [
                Subject(**_parse_dates(s, datetime_fields=("last_studied", "created_at", "updated_at")))
                for s in data["subjects"]
            ]
        else:
            subjects = load_subject_templates()
        progress = ProgressState(**data.get("settings", {}))
        level = calculate_level(progress.xp).level
    except (TypeError, ValueError) as e:
        raise ValueError("Invalid backup format") from e

    try:
        with write_transaction(db_path) as conn:
            for table in ("sessions", "resources", "goals", "subjects"):
                conn.execute(f"DELETE FROM {table}")
            conn.executemany(INSERT_RESOURCE, [resource_params(r) for r in resources])
            conn.executemany(INSERT_SESSION, [session_params(s) for s in sessions])
            conn.executemany(INSERT_GOAL, [goal_params(g) for g in goals])
            conn.executemany(INSERT_SUBJECT, [subject_params(s) for s in subjects])
            conn.execute(
                "UPDATE settings SET xp = ?, level = ?, streak = ?, longest_streak = ? WHERE id = 1",
                (progress.xp, level,
                 progress.current_streak_days, progress.longest_streak_days),
            )
    except (sqlite3.IntegrityError, sqlite3.InterfaceError, sqlite3.ProgrammingError) as e:
        # constraint violations and unbindable values from a parsed backup
        raise ValueError("Invalid backup format") from e

    counts = {
        "resources": len(resources), "sessions": len(sessions),
        "goals": len(goals), "subjects": len(subjects),
    }
    logger.info(
        "Imported %(resources)d resources, %(sessions)d sessions, %(goals)d goals, %(subjects)d subjects",
        counts,
    )
    return counts


def read_backup(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text())
        return json.loads(path.read_text())
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError("Invalid backup format") from e


def import_file(db_path: str, file_path: str) -> dict:
    return import_data(db_path, read_backup(file_path))


def export_file(db_path: str, file_path: str) -> str:
    """Write a backup; the format follows the file extension."""
    path = Path(file_path)
    data = export_data(db_path)
    if path.suffix.lower() in (".yaml", ".yml"):
        path.write_text(yaml.safe_dump(data, sort_keys=False))
    else:
        path.write_text(json.dumps(data, indent=2))
    return str(path)

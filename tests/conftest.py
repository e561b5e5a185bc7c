from datetime import date

import pytest

from study_hub.db import init_db


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary, initialized SQLite database path for tests."""
    db_path = str(tmp_path / "test_hub.db")
    init_db(db_path)
    return db_path


@pytest.fixture
def today():
    """A fixed reference day so date arithmetic is deterministic."""
    return date(2024, 3, 15)

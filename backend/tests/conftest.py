"""
Test configuration and shared fixtures for the agenda test suite.

The schema is built once per session by running the Alembic migrations.
Tests commit for real (post-commit notifications open their own sessions),
so every table is emptied after each test.

Set TEST_DATABASE_URL to run against PostgreSQL; a temporary SQLite file is
used otherwise.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

_TEST_DB_DIR = tempfile.mkdtemp(prefix="agenda_test_")
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB_DIR}/agenda_test.db")
# Must be set before core.config is imported anywhere
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest  # noqa: E402
from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from core.database import Base, SessionLocal, engine, get_db  # noqa: E402
import models  # noqa: E402,F401

BACKEND_DIR = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """
    Build the test schema from the migrations (base -> head).

    Runs once per session so every test exercises the migrated schema.
    """
    alembic_cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", TEST_DATABASE_URL)

    Base.metadata.drop_all(bind=engine)
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE IF EXISTS alembic_version"))

    command.upgrade(alembic_cfg, "head")

    yield

    Base.metadata.drop_all(bind=engine)
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
    engine.dispose()


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Provide a database session and wipe every table afterwards.
    """
    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient whose requests share the test's session."""
    from main import app

    app.dependency_overrides[get_db] = lambda: db_session
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)

"""
Test configuration and fixtures for the WCAG Audit API.

The database URL is pointed at a throwaway SQLite file before the
application is imported, so no test touches a real database.
"""

import os
import tempfile
from typing import Generator

from dotenv import load_dotenv

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from wcag_audit.features.analysis.services.store import AnalysisStore  # noqa: E402
from wcag_audit.platform.db.session import build_engine, build_session_factory, init_models  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from wcag_audit.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Entering the client runs the lifespan, which creates the tables.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory on a fresh SQLite file, isolated per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'analyses.db'}")
    await init_models(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
async def store(session_factory) -> AnalysisStore:
    return AnalysisStore(session_factory)

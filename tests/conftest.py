"""Shared pytest fixtures for skyvern_manager tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from skyvern_manager.config import Settings
from skyvern_manager.db.schema import Base
from skyvern_manager.providers.static import StaticWorkflowSource

CUTOFF = "2026-01-10T00:00:00Z"


def iso(day: int, hour: int = 12, seconds: int = 0) -> str:
    """Naive ISO timestamp in January 2026, as the run listing returns them."""
    value = datetime(2026, 1, day, hour, tzinfo=timezone.utc) + timedelta(seconds=seconds)
    return value.replace(tzinfo=None).isoformat()


def make_run(
    run_id: str,
    workflow_permanent_id: str,
    title: str | None,
    status: str,
    day: int,
    duration: int | None = None,
    hour: int = 12,
) -> dict:
    """Build a run listing record started on the given day."""
    run = {
        "workflow_run_id": run_id,
        "workflow_permanent_id": workflow_permanent_id,
        "workflow_title": title,
        "status": status,
        "started_at": iso(day, hour),
        "finished_at": iso(day, hour, duration) if duration is not None else None,
        "queued_at": iso(day, hour, -60),
    }
    return run


def make_workflows() -> list[dict]:
    """Three workflows across two folders, one still a draft."""
    return [
        {
            "workflow_permanent_id": "wpid_login",
            "title": "Login flow",
            "status": "published",
            "folder_id": "fld_a",
            "description": "Logs into the portal",
            "webhook_callback_url": "https://hooks.example.com/login",
            "workflow_definition": {
                "parameters": [
                    {
                        "key": "username",
                        "parameter_type": "workflow",
                        "workflow_parameter_type": "string",
                        "description": "Portal user name",
                    },
                    {
                        "key": "login_result",
                        "parameter_type": "output",
                        "description": "Result of the login block",
                    },
                    {
                        "key": "password",
                        "parameter_type": "workflow",
                        "workflow_parameter_type": "credential_id",
                        "description": None,
                    },
                ],
                "blocks": [{"label": "login", "block_type": "login"}],
            },
        },
        {
            "workflow_permanent_id": "wpid_invoice",
            "title": "Invoice download",
            "status": "published",
            "folder_id": "fld_b",
            "description": "Downloads monthly invoices",
            "webhook_callback_url": None,
            "workflow_definition": {"parameters": []},
        },
        {
            "workflow_permanent_id": "wpid_draft",
            "title": "Draft scraper",
            "status": "draft",
            "folder_id": "fld_a",
            "description": "Not ready",
            "workflow_definition": {"parameters": []},
        },
    ]


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def workflows() -> list[dict]:
    """Sample workflow records."""
    return make_workflows()


@pytest.fixture
def static_source(workflows) -> StaticWorkflowSource:
    """Static source over the sample workflows, no runs."""
    return StaticWorkflowSource(workflows)


@pytest.fixture
def make_client(engine):
    """Factory for a TestClient wired to the test database and a given source."""
    from skyvern_manager.api.app import (
        create_app,
        get_db_session,
        get_settings,
        get_workflow_source,
    )

    def _make(source, settings: Settings | None = None) -> TestClient:
        app = create_app()

        def override_get_db():
            with Session(engine) as db_session:
                yield db_session

        app.dependency_overrides[get_db_session] = override_get_db
        app.dependency_overrides[get_workflow_source] = lambda: source
        app.dependency_overrides[get_settings] = lambda: settings or Settings()
        return TestClient(app)

    return _make

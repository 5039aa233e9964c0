# adwizard-backend/tests/conftest.py

import os
import sys

import pytest

# Add the parent directory to the Python path so we can import from it
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import routers.generation as generation_module
from database import Base, create_tables, get_db
from main import app
from routers.generation import get_captions_client
from schemas import WizardState


class FakeCaptionsClient:
    """Stands in for CaptionsClient; records requests and serves canned statuses."""

    def __init__(self):
        self.created = []
        self.status_calls = []
        self.statuses = {}
        self.create_error = None
        self.status_error = None

    def create_video(self, body):
        if self.create_error:
            raise self.create_error
        self.created.append(body)
        return f"cap_{len(self.created)}"

    def get_status(self, job_id):
        self.status_calls.append(job_id)
        if self.status_error:
            raise self.status_error
        return self.statuses.get(job_id, {"status": "processing"})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def captions():
    return FakeCaptionsClient()


@pytest.fixture
def scheduled(monkeypatch):
    """Vendor job ids whose background poll would have been started."""
    job_ids = []
    monkeypatch.setattr(generation_module, "schedule_status_poll", job_ids.append)
    return job_ids


@pytest.fixture
def client(session_factory, captions, scheduled):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_captions_client] = lambda: captions
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def acme_state():
    return WizardState(
        brand="Acme Insurance",
        brand_voice="friendly-empathetic",
        offer="Auto quotes",
        primary_benefit="save-money",
        audience="Families",
        pain_point="High premiums",
        outcome="Save $400/year",
        cta="call-for-quote",
        length="30s",
        no_avatar=True,
    )

import os
import sys

# Override env vars for testing; must happen before db.py builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("REPORTS_DIR", os.path.join("uploads", "test_reports"))

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base, get_db
from main import app


@pytest.fixture
def engine():
    """Fresh in-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def enroll(client):
    """Post an enrollment, filling in the required fields the test doesn't care about."""
    def _enroll(**fields):
        payload = {
            "name": "Test Student",
            "floor": "1st Floor",
            "seat_no": "F1",
            "fees": 1000,
            "package_months": 1,
        }
        payload.update(fields)
        return client.post("/api/students/create", json=payload)
    return _enroll

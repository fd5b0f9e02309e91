"""Shared test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from api.dependencies import get_db, limiter
from config import settings
from database import Base, create_db_engine
from main import app
from models.job import Company, JobPosting

SAMPLE_JOB = {
    "title": "Backend Engineer",
    "company": {"name": "Acme"},
    "location": "Remote",
    "remote": "remote",
    "seniority": "mid",
    "employment_type": "full_time",
    "skills_required": ["Python", "Docker"],
    "description_html": "<p>Build APIs with Python and Docker</p>",
}

SAMPLE_RESUME = (
    "I have 5 years of Python experience and have used Docker "
    "extensively to build APIs."
)


@pytest.fixture
def sample_job() -> JobPosting:
    return JobPosting(
        title="Backend Engineer",
        company=Company(name="Acme"),
        location="Remote",
        skills_required=["Python", "Docker"],
        description_html="<p>Build APIs with Python and Docker</p>",
    )


@pytest.fixture
def sample_resume() -> str:
    return SAMPLE_RESUME


@pytest.fixture(autouse=True)
def _fast_settings(monkeypatch):
    """Cheap bcrypt and no rate limiting in tests."""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)
    monkeypatch.setattr(limiter, "enabled", False)


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    # Not used as a context manager: lifespan would create the on-disk database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register an account and return the token response body."""
    def _register(email="jane@example.com", password="correct-horse") -> dict:
        response = client.post(
            "/v1/auth/register",
            json={
                "first_name": "Jane",
                "last_name": "Doe",
                "email": email,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_user) -> dict:
    tokens = register_user()
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def sample_job_payload() -> dict:
    return dict(SAMPLE_JOB)


@pytest.fixture
def job_id(client, auth_headers, sample_job_payload) -> str:
    response = client.post("/v1/jobs/import", json=sample_job_payload, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]

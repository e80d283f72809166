import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jobconnect")

import pytest
from fastapi.testclient import TestClient

from jobconnect.database import get_repository
from jobconnect.main import app
from jobconnect.repositories.memory import InMemoryRepository

JOB_PAYLOAD = {
    "title": "Backend Developer",
    "company": "Acme Corp",
    "description": "Build and run our APIs.",
    "requirements": "3+ years of Python",
    "location": "Austin, TX",
    "job_type": "full-time",
    "work_mode": "hybrid",
    "experience_level": "mid",
    "salary": {"min": 90000, "max": 120000},
    "skills": ["Python", "MongoDB"],
}


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    c = TestClient(app, raise_server_exceptions=False)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return ``(user, headers)``."""

    def _register(username, role="job_seeker", **profile):
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "s3cret-pass",
            "role": role,
            "profile": profile,
        })
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def post_job(client):
    """Create a job as the given recruiter and return its JSON."""

    def _post_job(headers, **overrides):
        r = client.post("/api/jobs", json={**JOB_PAYLOAD, **overrides}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]["job"]

    return _post_job

"""
Pytest configuration and shared fixtures.

Settings are read at import time, so the environment is prepared before
anything from qa_ops is imported.
"""
import os
from datetime import datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.setdefault("AUTH_TOKEN_SECRET", "test-secret-key-with-enough-length-for-hs256")
for _name in ("ADMIN_EMAIL", "ADMIN_PASSWORD", "JENKINS_URL", "GIT_API_TOKEN"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

from qa_ops.core.constants import BuildResult, UserRole
from qa_ops.core.database import Base, SessionLocal, engine
from qa_ops.core.errors import GitHostError, JenkinsError
from qa_ops.main import app as fastapi_app
from qa_ops.modules.jenkins.client import BuildInfo
from qa_ops.modules.users.schemas import UserCreate
from qa_ops.modules.users.service import UsersService


API = "/api/v1"
PASSWORD = "correct-horse-battery"


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db):
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def create_user(db, email: str, role: UserRole, active: bool = True):
    user = UsersService(db).register_user(UserCreate(email=email, password=PASSWORD), role=role)
    user.is_active = active
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login_headers(client, email: str) -> dict[str, str]:
    response = client.post(f"{API}/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, db):
    create_user(db, "admin@example.com", UserRole.ADMIN)
    return login_headers(client, "admin@example.com")


@pytest.fixture
def qa_headers(client, db):
    create_user(db, "qa@example.com", UserRole.QA_ENGINEER)
    return login_headers(client, "qa@example.com")


@pytest.fixture
def viewer_headers(client, db):
    create_user(db, "viewer@example.com", UserRole.VIEWER)
    return login_headers(client, "viewer@example.com")


def hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


def build(number: int, result: BuildResult = BuildResult.SUCCESS, hours: float = 1.0, duration_ms: int = 60_000) -> BuildInfo:
    return BuildInfo(
        number=number,
        result=result,
        duration_ms=duration_ms,
        started_at=hours_ago(hours),
        url=f"https://jenkins.example.com/job/x/{number}/",
    )


class FakeJenkinsClient:
    def __init__(self, builds=None, failing=None):
        self.builds = builds or {}
        self.failing = set(failing or ())
        self.calls: list[tuple[str, int]] = []

    def get_builds(self, job_name: str, depth: int = 50):
        self.calls.append((job_name, depth))
        if job_name in self.failing:
            raise JenkinsError(f"Jenkins job '{job_name}' not found")
        return list(self.builds.get(job_name, []))


class FakeGitClient:
    def __init__(self, branches=None, fail_on=None):
        self.branches: dict[tuple[str, str], str] = dict(branches or {})
        self.fail_on = set(fail_on or ())
        self.calls: list[tuple] = []

    def _maybe_fail(self, op: str):
        if op in self.fail_on:
            raise GitHostError(f"{op} failed with HTTP 500")

    def get_branch_sha(self, repository: str, branch: str):
        self.calls.append(("get", repository, branch))
        self._maybe_fail("get")
        return self.branches.get((repository, branch))

    def delete_branch(self, repository: str, branch: str) -> None:
        self.calls.append(("delete", repository, branch))
        self._maybe_fail("delete")
        self.branches.pop((repository, branch), None)

    def create_branch(self, repository: str, branch: str, sha: str) -> None:
        self.calls.append(("create", repository, branch, sha))
        self._maybe_fail("create")
        self.branches[(repository, branch)] = sha

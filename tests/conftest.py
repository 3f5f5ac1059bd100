# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ADMIN_SECRET_CODE", "open-sesame")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="fixmyhood-uploads-"))

from fixmyhood.api.v1 import dependencies  # noqa: E402
from fixmyhood.core.security import create_access_token  # noqa: E402
from fixmyhood.db.session import Base  # noqa: E402
from fixmyhood.db.session import get_db as app_get_session  # noqa: E402
from fixmyhood.db.time import utcnow  # noqa: E402
from fixmyhood.main import app as fastapi_app  # noqa: E402
from fixmyhood.models import Comment, CommentType, Profile, Report, ReportCategory  # noqa: E402
from fixmyhood.services.rate_limit import RateLimiter  # noqa: E402
from fixmyhood.services.storage import LocalBlobStore  # noqa: E402

TEST_DB_URL = "sqlite://"

_PROFILE_COUNTER = count(1)
# Reports are stamped with strictly increasing times so feed order is deterministic.
_REPORT_CLOCK = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so each test wipes the tables afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def blob_store(app: FastAPI, tmp_path: Path) -> Iterator[LocalBlobStore]:
    """Route uploads to a per-test directory."""
    store = LocalBlobStore(tmp_path / "uploads", "/static/uploads")
    app.dependency_overrides[dependencies.get_blob_store_dep] = lambda: store
    try:
        yield store
    finally:
        app.dependency_overrides.pop(dependencies.get_blob_store_dep, None)


@pytest.fixture()
def rate_limiter(app: FastAPI) -> Iterator[RateLimiter]:
    """Enable cooldowns backed by the in-process table."""
    limiter = RateLimiter()
    app.dependency_overrides[dependencies.get_rate_limiter_dep] = lambda: limiter
    try:
        yield limiter
    finally:
        app.dependency_overrides.pop(dependencies.get_rate_limiter_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_profile(db_session: Session) -> Callable[..., Profile]:
    """Return a factory that persists profiles."""

    def _make(display_name: str | None = None, **fields: Any) -> Profile:
        n = next(_PROFILE_COUNTER)
        profile = Profile(
            id=fields.pop("id", f"user-{n:04d}"),
            display_name=display_name or f"Neighbour {n}",
            **fields,
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture()
def make_report(db_session: Session) -> Callable[..., Report]:
    """Return a factory that persists reports with increasing timestamps."""
    base_time = utcnow()

    def _make(creator: Profile, title: str = "Broken streetlight on Elm", **fields: Any) -> Report:
        created_at = base_time + timedelta(seconds=next(_REPORT_CLOCK))
        report = Report(
            creator_id=creator.id,
            title=title,
            description=fields.pop("description", "Needs attention"),
            category=fields.pop("category", ReportCategory.INFRASTRUCTURE.value),
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )
        db_session.add(report)
        db_session.commit()
        return report

    return _make


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    """Return a factory that persists comments directly, bypassing posting rules."""

    def _make(
        report: Report,
        author: Profile,
        comment_type: CommentType = CommentType.COMMENT,
        content: str = "Seen this too",
        **fields: Any,
    ) -> Comment:
        comment = Comment(
            report_id=report.id,
            user_id=author.id,
            comment_type=comment_type.value,
            content=content,
            **fields,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return _make


@pytest.fixture()
def test_user(make_profile: Callable[..., Profile]) -> Profile:
    """Create and return the primary test user."""
    return make_profile("Test User")


@pytest.fixture()
def other_user(make_profile: Callable[..., Profile]) -> Profile:
    """Create and return a second test user."""
    return make_profile("Other User")


@pytest.fixture()
def admin_user(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile("Admin", is_admin=True)


def auth_headers(profile_id: str, **claims: Any) -> dict[str, str]:
    token = create_access_token(profile_id, claims or None)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_token(test_user: Profile) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user.id)


@pytest.fixture()
def other_auth_token(other_user: Profile) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user.id)


@pytest.fixture()
def admin_auth_token(admin_user: Profile) -> dict[str, str]:
    return auth_headers(admin_user.id)


@pytest.fixture()
def test_report(make_report: Callable[..., Report], test_user: Profile) -> Report:
    """Create a baseline report owned by the primary test user."""
    return make_report(test_user)

"""Pytest fixtures for the moderation backend.

Provides reusable test fixtures for:
- A file-backed SQLite database per test (shared across threads)
- A temporary staging directory
- Fake durable store and notifier
- A submission factory that stages bytes and inserts rows
- A TestClient with every collaborator overridden

Usage:
    def test_reject(review_service, make_submission):
        submission = make_submission()
        review_service.reject(submission.id, reviewer_id=1, reason="blurry")
"""

import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator, Optional

# Set environment variables BEFORE any fanvault imports so module-level
# settings and engine never point at a developer database
_TEST_ROOT = tempfile.mkdtemp(prefix="fanvault-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_ROOT}/default.db")
os.environ.setdefault("STAGING_DIR", f"{_TEST_ROOT}/staging")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("REDIS_URL", "redis://localhost:6399/0")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from fanvault.database import build_engine, get_db, init_db
from fanvault.dependencies import (
    get_durable_store,
    get_notifier,
    get_retention_config_store,
    get_staging_store,
)
from fanvault.domain.submissions import SubmissionCategory, SubmissionStatus
from fanvault.infrastructure.storage.staging_store import LocalStagingStore
from fanvault.models.base import utcnow
from fanvault.models.pending_submission import PendingSubmission
from fanvault.retention.config_store import RetentionConfigStore
from fanvault.retention.lock import CleanupLock
from fanvault.retention.router import get_cleanup_lock
from fanvault.retention.service import RetentionService
from fanvault.review.service import ReviewService

from fixtures.fakes import FakeDurableStore, FakeNotifier
from fixtures.images import PNG_BYTES


STAGING_BASE_URL = "http://testserver/api/v1/review/staged"


@pytest.fixture(scope="function")
def engine(tmp_path):
    """File-backed SQLite engine so worker threads share one database."""
    test_engine = build_engine(f"sqlite:///{tmp_path}/moderation.db")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Fresh database session for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def staging(tmp_path) -> LocalStagingStore:
    return LocalStagingStore(tmp_path / "staging", STAGING_BASE_URL)


@pytest.fixture(scope="function")
def durable_store() -> FakeDurableStore:
    return FakeDurableStore()


@pytest.fixture(scope="function")
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture(scope="function")
def config_store(session_factory) -> RetentionConfigStore:
    """Retention settings stored in the test database, defaults 7 days / 100."""
    return RetentionConfigStore(session_factory)


@pytest.fixture(scope="function")
def review_service(db_session, staging, durable_store, notifier) -> ReviewService:
    return ReviewService(db_session, staging, durable_store, notifier)


@pytest.fixture(scope="function")
def retention_service(db_session, staging, config_store) -> RetentionService:
    return RetentionService(db_session, staging, config_store, CleanupLock())


@pytest.fixture(scope="function")
def make_submission(db_session, staging):
    """Factory staging bytes and inserting a submission row.

    Example:
        submission = make_submission(status=SubmissionStatus.REJECTED, created_at=old)
    """

    def _make(
        title: str = "Sunset",
        filename: str = "sunset.png",
        content: bytes = PNG_BYTES,
        category: SubmissionCategory = SubmissionCategory.FANART,
        status: SubmissionStatus = SubmissionStatus.PENDING,
        submitter_id: int = 42,
        created_at: Optional[datetime] = None,
        reject_reason: Optional[str] = None,
        write_file: bool = True,
    ) -> PendingSubmission:
        key = staging.generate_key(filename, category.value)
        if write_file:
            staging.write(key, content)

        if status == SubmissionStatus.REJECTED and reject_reason is None:
            reject_reason = "Does not meet community guidelines"

        submission = PendingSubmission(
            title=title,
            category=category,
            original_filename=filename,
            file_size_bytes=len(content),
            mime_type="image/png",
            staged_path=key,
            public_url=staging.public_url(key),
            status=status,
            reject_reason=reject_reason,
            submitter_id=submitter_id,
            created_at=created_at or utcnow(),
        )
        db_session.add(submission)
        db_session.commit()
        db_session.refresh(submission)
        return submission

    return _make


@pytest.fixture(scope="function")
def client(session_factory, staging, durable_store, notifier, config_store):
    """TestClient with database, storage, notifier and retention state overridden."""
    from fanvault.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_staging_store] = lambda: staging
    app.dependency_overrides[get_durable_store] = lambda: durable_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_retention_config_store] = lambda: config_store
    app.dependency_overrides[get_cleanup_lock] = lambda: CleanupLock()

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"X-User-Id": "42", "X-User-Role": "user"}


@pytest.fixture
def reviewer_headers():
    return {"X-User-Id": "7", "X-User-Role": "reviewer"}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "1", "X-User-Role": "admin"}

"""
Pytest configuration and fixtures for content engine tests
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

import content_engine.models  # noqa: E402, F401
from content_engine.database import Base  # noqa: E402
from content_engine.services.lifecycle_service import LifecycleService  # noqa: E402

# SQLite in-memory database, one per test function
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingDispatcher:
    """Notification sink that records submitted jobs instead of queueing them."""

    def __init__(self):
        self.jobs = []

    def submit(self, job) -> bool:
        self.jobs.append(job)
        return True


@pytest.fixture(scope="function")
async def test_engine():
    """Create a fresh database for each test function"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests that need it."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def landing_service(test_db, dispatcher):
    return LifecycleService(test_db, "landing", dispatcher=dispatcher)


@pytest.fixture
def partner_service(test_db, dispatcher):
    return LifecycleService(test_db, "partner", dispatcher=dispatcher)


@pytest.fixture
def faq_service(test_db, dispatcher):
    return LifecycleService(test_db, "faq", dispatcher=dispatcher)


@pytest.fixture
def make_body():
    """Build a content body mapping with sensible defaults."""

    def _make_body(title="Title", language="en", mode="Draft", **overrides):
        body = {
            "language": language,
            "mode": mode,
            "workflow_status": "Draft",
            "publish_status": "UnPublished",
            "title": title,
            "html_input": f"<p>{title}</p>",
            "url_alias": "",
            "meta_tag": {"title": f"{title} meta", "description": "", "cover_image": ""},
            "revision": {"author": "Editor <editor@example.com>", "message": f"Saved {title}"},
            "categories": [],
            "components": [],
        }
        body.update(overrides)
        return body

    return _make_body

"""
Shared test configuration.

Environment is pinned before any studio module is imported so the
module-level settings, engine and singletons pick it up.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["ENABLE_VIDEO_POLLER"] = "false"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="studio-static-")
os.environ["MINIMAX_API_KEY"] = "test-minimax-key"
os.environ["RUNWAY_API_KEY"] = "test-runway-key"
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AWS_SECRET_ACCESS_KEY"] = ""
os.environ["S3_BUCKET_NAME"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import studio.models  # noqa: F401  register table metadata
from tests.fakes import FakeImageService, FakeScriptParser, FakeStorage


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


# ============================================================================
# Collaborators
# ============================================================================


@pytest.fixture
def image_client():
    return FakeImageService()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def script_parser():
    return FakeScriptParser()

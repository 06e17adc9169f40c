"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from meetnotes.api.dependencies import get_summary_service
from meetnotes.infrastructure.models import Base, ShareModel
from meetnotes.infrastructure.usage_logger import UsageLogger
from meetnotes.main import app
from meetnotes.services.email_sender import EmailResult
from meetnotes.services.summarizer import SummarizationResult
from meetnotes.services.summary_service import SummaryService

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def count_shares(test_session):
    """Count share rows recorded for a summary."""

    async def _count(summary_id: str) -> int:
        stmt = select(func.count(ShareModel.id)).where(ShareModel.summary_id == summary_id)
        return (await test_session.execute(stmt)).scalar_one()

    return _count


@pytest.fixture
def fake_summarizer() -> MagicMock:
    """Summarizer whose model call returns a fixed completion."""
    summarizer = MagicMock()
    summarizer.summarize = AsyncMock(
        return_value=SummarizationResult(
            summary="Hello summary",
            tokens_in=50,
            tokens_out=10,
            model="llama3-70b-8192",
        )
    )
    return summarizer


@pytest.fixture
def fake_email() -> MagicMock:
    """Email service that always reports a successful send."""
    email_service = MagicMock()
    email_service.send_summary = AsyncMock(
        return_value=EmailResult(success=True, body_html="<p>Hello summary</p>", message_id="m1")
    )
    email_service.verify_config = AsyncMock(return_value=True)
    return email_service


@pytest.fixture
def usage_logger(tmp_path) -> UsageLogger:
    return UsageLogger(tmp_path / "usage.csv")


@pytest.fixture
def service(test_session, fake_summarizer, fake_email, usage_logger) -> SummaryService:
    """SummaryService bound to the test session and fake collaborators."""
    return SummaryService(test_session, fake_summarizer, fake_email, usage_logger=usage_logger)


@pytest.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client wired to the test service."""

    async def override_service() -> AsyncGenerator[SummaryService, None]:
        yield service

    app.dependency_overrides[get_summary_service] = override_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

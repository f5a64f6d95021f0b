import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "postgresql+asyncpg://mission:mission@db:5432/mission_control_test")
os.environ.setdefault("CRON_API_URL", "http://cron.invalid/api/cron")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


def make_execute_result(rows: list | None = None, scalars: list | None = None, scalar=None, first=None):
    """Build a mock SQLAlchemy Result exposing the accessors the app uses."""
    result = MagicMock()
    result.fetchall.return_value = rows if rows is not None else []
    result.all.return_value = rows if rows is not None else []
    result.first.return_value = first
    result.scalar.return_value = scalar
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = scalars if scalars is not None else []
    return result


async def _assign_id(instance, *args, **kwargs):
    """Mimic the primary key a real INSERT would have produced."""
    if getattr(instance, "id", None) is None:
        instance.id = f"generated-{type(instance).__name__.lower()}"


@pytest.fixture
def mock_session() -> MagicMock:
    """A stand-in AsyncSession whose awaited methods are AsyncMocks.

    Tests configure ``mock_session.execute`` (usually with ``side_effect``)
    and ``mock_session.get`` to return the records they need.
    """
    session = MagicMock()
    session.execute = AsyncMock(return_value=make_execute_result())
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.refresh = AsyncMock(side_effect=_assign_id)
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest_asyncio.fixture(scope="function")
async def test_app(mock_session: MagicMock):
    """Provide the FastAPI app with the database dependency overridden."""
    from app.database import get_db
    from app.main import app

    async def override_get_db():
        yield mock_session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client bound to the app (no real database)."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def spawned_activity_logs():
    """Capture background activity-log writes instead of touching the database."""
    calls: list[dict] = []

    def _record(**kwargs):
        calls.append(kwargs)

    with (
        patch("app.api.projects.spawn_activity_log", side_effect=_record),
        patch("app.api.tasks.spawn_activity_log", side_effect=_record),
    ):
        yield calls

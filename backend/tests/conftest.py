"""
tests/conftest.py

Test fixtures for API integration and unit tests.
Includes async clients, fake callers, an in-memory SQLite database,
an in-memory evaluation cache and dependency overrides.
"""
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Settings are read at import time.
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

# --- Imports ---
from collections.abc import AsyncGenerator, Generator
from datetime import date
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kycgate.core.dependencies import get_current_user
from kycgate.core.schemas import CurrentUser
from kycgate.database.enums import AccountType, Role
from kycgate.database.session import get_db, init_db
from kycgate.main import app
from kycgate.verification.cache import EvaluationCache, evaluation_key, get_evaluation_cache
from kycgate.verification.schemas import EvaluationRead


# --- Core Test Fixtures ---


@pytest.fixture(scope="session")
def transport() -> ASGITransport:
    """Fixture for ASGI transport."""
    return ASGITransport(app=app)


@pytest_asyncio.fixture(scope="function")
async def async_client(transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """Fixture for HTTP async client."""
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# --- Database Fixtures ---


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# --- Cache Fixtures ---


class InMemoryEvaluationCache(EvaluationCache):
    """Evaluation cache keeping entries in a dict instead of Redis."""

    def __init__(self) -> None:
        super().__init__(client=None)
        self.entries: dict[str, str] = {}
        self.invalidations: list[UUID] = []

    async def get(self, user_id: UUID, role: Role) -> EvaluationRead | None:
        raw = self.entries.get(evaluation_key(user_id, role))
        return EvaluationRead.model_validate_json(raw) if raw is not None else None

    async def store(self, evaluation: EvaluationRead) -> None:
        self.entries[evaluation_key(evaluation.user_id, evaluation.role)] = evaluation.model_dump_json()

    async def invalidate(self, user_id: UUID) -> None:
        self.invalidations.append(user_id)
        for role in Role:
            self.entries.pop(evaluation_key(user_id, role), None)


@pytest.fixture
def evaluation_cache() -> InMemoryEvaluationCache:
    return InMemoryEvaluationCache()


# --- Fake Caller Fixtures ---


@pytest.fixture
def fake_user() -> CurrentUser:
    """Fixture for a fake regular user."""
    return CurrentUser(id=uuid4(), account=AccountType.USER, session_id=f"sess-{uuid4()}")


@pytest.fixture
def fake_admin_user() -> CurrentUser:
    """Fixture for a fake reviewer account."""
    return CurrentUser(id=uuid4(), account=AccountType.ADMIN, session_id=f"sess-{uuid4()}")


# --- Dependency Override Fixtures ---


@pytest_asyncio.fixture
async def override_get_db() -> AsyncGenerator[None, None]:
    """Override for the database dependency."""

    async def _override() -> AsyncGenerator[AsyncMock, None]:
        yield AsyncMock()

    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def override_get_db_sqlite(
    session_factory: async_sessionmaker[AsyncSession],
    evaluation_cache: InMemoryEvaluationCache,
) -> AsyncGenerator[None, None]:
    """Route requests to the in-memory SQLite database and cache."""

    async def _override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_evaluation_cache] = lambda: evaluation_cache
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_evaluation_cache, None)


@pytest.fixture
def mock_current_user(fake_user: CurrentUser) -> Generator[CurrentUser, None, None]:
    """Mock the current caller as a regular user."""
    app.dependency_overrides[get_current_user] = lambda: fake_user
    yield fake_user
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def mock_current_admin_user(fake_admin_user: CurrentUser) -> Generator[CurrentUser, None, None]:
    """Mock the current caller as a reviewer."""
    app.dependency_overrides[get_current_user] = lambda: fake_admin_user
    yield fake_admin_user
    app.dependency_overrides.pop(get_current_user, None)


# --- Fake Data Fixtures ---


@pytest.fixture
def personal_info_data() -> dict[str, Any]:
    """Valid personal details, as stored."""
    return {
        "first_name": "Ada",
        "last_name": "Okafor",
        "date_of_birth": date(1990, 5, 17),
        "nationality": "Nigerian",
        "occupation": "Engineer",
        "street": "12 Marina Road, Victoria Island",
        "city": "Lagos",
        "state": "Lagos",
        "country": "Nigeria",
        "postal_code": "101241",
    }


@pytest.fixture
def personal_info_payload(personal_info_data: dict[str, Any]) -> dict[str, Any]:
    """Valid personal details, as sent over HTTP."""
    return {**personal_info_data, "date_of_birth": personal_info_data["date_of_birth"].isoformat()}

@pytest.fixture
def business_info_data() -> dict[str, Any]:
    """Valid merchant business details."""
    return {
        "business_name": "Okafor Provisions Ltd",
        "business_type": "Retail",
        "registration_number": "RC-1234567",
        "tax_id": "TIN-20394857",
        "street": "4 Broad Street, Lagos Island",
        "city": "Lagos",
        "state": "Lagos",
        "country": "Nigeria",
        "postal_code": "102273",
    }


@pytest.fixture
def driver_info_data() -> dict[str, Any]:
    """Valid driver license and vehicle details, as stored."""
    return {
        "license_number": "LAG-55821-AB",
        "license_expiry": date(2099, 1, 31),
        "vehicle_make": "Toyota",
        "vehicle_model": "Corolla",
        "vehicle_year": 2019,
        "plate_number": "KJA-123-XY",
        "vehicle_registration_number": "VR-0098123",
    }

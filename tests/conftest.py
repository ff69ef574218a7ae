"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""
import os

# The application engine is created at import time; keep it off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./lidobook-test.db")

import pytest
from typing import AsyncGenerator, List, Tuple
from uuid import UUID, uuid4
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from lidobook.main import app
from lidobook.api.dependencies import get_notifier
from lidobook.db.base import Base
from lidobook.db.database import get_db
from lidobook.db import models  # noqa: F401
from lidobook.db.models.tenant import Tenant
from lidobook.db.models.resource import Resource
from lidobook.services.notification_service import NotificationService
from lidobook.services.payment_service import PaymentService
from lidobook.services.reservation_service import ReservationService
from lidobook.services.resource_service import ResourceService


class RecordingNotifier(NotificationService):
    """Captures booking events instead of sending email"""

    def __init__(self):
        super().__init__()
        self.events: List[Tuple[str, str]] = []

    async def booking_confirmed(self, reservation) -> bool:
        self.events.append(("booking_confirmed", reservation.booking_code))
        return True

    async def booking_cancelled(self, reservation, reason: str) -> bool:
        self.events.append(("booking_cancelled", reservation.booking_code))
        return True

    async def payment_confirmed(self, reservation, payment) -> bool:
        self.events.append(("payment_confirmed", reservation.booking_code))
        return True

    async def payment_refunded(self, reservation, payment, reason: str) -> bool:
        self.events.append(("payment_refunded", reservation.booking_code))
        return True

    def names(self) -> List[str]:
        return [name for name, _ in self.events]


class FailingNotifier(NotificationService):
    """Every send blows up"""

    async def _notify(self, reservation, subject, intro, details) -> bool:
        raise RuntimeError("SMTP relay unreachable")


@pytest.fixture(scope="function")
async def engine(tmp_path):
    """Fresh SQLite file per test; separate connections can race on it"""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lidobook.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _create_tenant(session_factory, name: str, plan: str = "free") -> Tenant:
    # Own session: a rollback in the test session must not expire fixtures
    async with session_factory() as session:
        tenant = Tenant(name=name, plan=plan, status="active")
        session.add(tenant)
        await session.commit()
        return tenant


@pytest.fixture
async def tenant(session_factory) -> Tenant:
    """Beach club on the free plan"""
    return await _create_tenant(session_factory, "Bagni Aurora")


@pytest.fixture
async def other_tenant(session_factory) -> Tenant:
    return await _create_tenant(session_factory, "Lido Miramare")


@pytest.fixture
async def enterprise_tenant(session_factory) -> Tenant:
    return await _create_tenant(session_factory, "Grand Hotel Beach", plan="enterprise")


@pytest.fixture
async def umbrella(session_factory, tenant: Tenant) -> Resource:
    """Umbrella #12, row A, standard"""
    async with session_factory() as session:
        return await ResourceService(session).create_resource(tenant.id, 12, "A")


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def resource_service(db_session: AsyncSession) -> ResourceService:
    return ResourceService(db_session)


@pytest.fixture
def reservation_service(db_session: AsyncSession, notifier: RecordingNotifier) -> ReservationService:
    return ReservationService(db_session, notifier)


@pytest.fixture
def payment_service(db_session: AsyncSession, notifier: RecordingNotifier) -> PaymentService:
    return PaymentService(db_session, notifier)


@pytest.fixture
async def client(session_factory, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """API client on the test database"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()

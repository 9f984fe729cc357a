"""
SafeDrive - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, Awaitable, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

from safedrive.main import app
from safedrive.core.config import settings
from safedrive.core.database import Base, get_db
from safedrive.core.security import get_password_hash, create_access_token
from safedrive.models import (
    User,
    UserRole,
    Driver,
    Gender,
    SystemAlert,
    AlertType,
    AlertSeverity,
    Notification,
    NotificationType,
    HealthReport,
    RiskLevel,
    AttendanceRecord,
    AttendanceStatus,
)
from safedrive.services.alert_thresholds import instance_tracker

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(autouse=True)
def reset_instance_tracker():
    """Daily parameter instances are process-wide; start every test clean"""
    instance_tracker.reset()
    yield
    instance_tracker.reset()


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, role: UserRole, is_active: bool = True) -> User:
    user = User(
        email=fake.unique.email().lower(),
        hashed_password=get_password_hash(TEST_PASSWORD),
        name=fake.name(),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user"""
    return await _create_user(db_session, UserRole.SUPERVISOR)


@pytest.fixture
async def inactive_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.MANAGER, is_active=False)


def token_for(user: User) -> str:
    return create_access_token({
        'sub': user.id,
        'email': user.email,
        'name': user.name,
        'role': user.role.value,
    })


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate bearer authentication headers for test user"""
    return {'Authorization': f'Bearer {token_for(test_user)}'}


@pytest.fixture
async def auth_client(client: AsyncClient, test_user: User) -> AsyncClient:
    """Client carrying the session cookie of test_user"""
    client.cookies.set(settings.AUTH_COOKIE_NAME, token_for(test_user))
    return client


@pytest.fixture
def make_driver(db_session: AsyncSession) -> Callable[..., Awaitable[Driver]]:
    counter = {'n': 0}

    async def _make(**overrides) -> Driver:
        counter['n'] += 1
        data = {
            'driver_code': f"DRV-{counter['n']:03d}",
            'name': fake.name(),
            'phone': fake.numerify('98########'),
            'age': fake.random_int(min=25, max=60),
            'gender': Gender.MALE,
        }
        data.update(overrides)
        driver = Driver(**data)
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver

    return _make


@pytest.fixture
def make_alert(db_session: AsyncSession) -> Callable[..., Awaitable[SystemAlert]]:
    async def _make(**overrides) -> SystemAlert:
        data = {
            'title': fake.sentence(nb_words=4),
            'message': fake.sentence(),
            'type': AlertType.HEALTH,
            'severity': AlertSeverity.WARNING,
            'is_read': False,
            'organization_id': settings.DEFAULT_ORGANIZATION_ID,
            'alert_metadata': {},
        }
        data.update(overrides)
        alert = SystemAlert(**data)
        db_session.add(alert)
        await db_session.commit()
        await db_session.refresh(alert)
        return alert

    return _make


@pytest.fixture
def make_notification(db_session: AsyncSession) -> Callable[..., Awaitable[Notification]]:
    async def _make(**overrides) -> Notification:
        data = {
            'title': fake.sentence(nb_words=4),
            'message': fake.sentence(),
            'type': NotificationType.INFO,
            'read': False,
            'organization_id': settings.DEFAULT_ORGANIZATION_ID,
            'notification_metadata': {},
        }
        data.update(overrides)
        notification = Notification(**data)
        db_session.add(notification)
        await db_session.commit()
        await db_session.refresh(notification)
        return notification

    return _make


@pytest.fixture
def make_health_report(db_session: AsyncSession) -> Callable[..., Awaitable[HealthReport]]:
    async def _make(driver: Driver, **overrides) -> HealthReport:
        data = {
            'driver_id': driver.id,
            'report_date': datetime.utcnow(),
            'blood_pressure_high': 118,
            'blood_pressure_low': 76,
            'heart_rate': 72,
            'risk_level': RiskLevel.NORMAL,
        }
        data.update(overrides)
        report = HealthReport(**data)
        db_session.add(report)
        await db_session.commit()
        await db_session.refresh(report)
        return report

    return _make


@pytest.fixture
def make_attendance(db_session: AsyncSession) -> Callable[..., Awaitable[AttendanceRecord]]:
    async def _make(driver: Driver, **overrides) -> AttendanceRecord:
        now = datetime.utcnow()
        data = {
            'driver_id': driver.id,
            'date': now.date(),
            'check_in_time': now,
            'status': AttendanceStatus.PRESENT,
        }
        data.update(overrides)
        record = AttendanceRecord(**data)
        db_session.add(record)
        await db_session.commit()
        await db_session.refresh(record)
        return record

    return _make

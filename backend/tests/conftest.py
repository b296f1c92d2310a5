"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.models.enums import UserRole
from backend.app.models.user import User
from backend.app.core.security import get_password_hash
from backend.app.services.email_notifier import EmailProvider, TripNotifier, get_notifier
import backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

ADMIN_EMAIL = "admin@greaterandbetter.com"
ADMIN_PASSWORD = "Admin@123456"


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False
    
    async def ping(self):
        if self._closed:
            return False
        return True
    
    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)
        
    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        if self._closed:
            return False
        self.store[key] = value
        self.ttls[key] = ttl
        return True
    
    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0
    
    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0
        
    async def flushdb(self):
        if not self._closed:
            self.store = {}
            self.ttls = {}
        
    async def aclose(self):
        self._closed = True
        self.store = {}


class RecordingEmailProvider(EmailProvider):
    """Keeps outgoing messages in memory; addresses in fail_for raise."""

    name = "recording"

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    async def send(self, message):
        if message.to in self.fail_for:
            raise RuntimeError(f"550 mailbox unavailable: {message.to}")
        self.sent.append(message)

    def recipients(self):
        return [message.to for message in self.sent]


# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()

@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session.
    Global override is safer here than per-test override to avoid app state flux.
    """
    
    # Patch the global redis client used for token revocation
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session
    
    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    
    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client

@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    await redis_client_session.flushdb()
    
    yield
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest.fixture(autouse=True)
def email_provider():
    """Route every notification through an in-memory provider."""
    provider = RecordingEmailProvider()
    notifier = TripNotifier(
        provider=provider,
        admin_email="leads@greaterandbetter.com",
        sender_email="no-reply@greaterandbetter.com",
        sender_name="Greater & Better Travel",
        timeout=1.0,
    )
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield provider
    app.dependency_overrides.pop(get_notifier, None)

@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

@pytest.fixture
def session_factory():
    return TestingSessionLocal

# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session

@pytest.fixture
async def admin_token(client, db_session):
    """Create admin user directly (admins cannot self-register) and return auth token."""
    admin = User(
        name="Admin",
        email=ADMIN_EMAIL,
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    db_session.add(admin)
    await db_session.commit()

    response = await client.post("/api/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD
    })
    assert response.status_code == 200
    return response.json()["token"]

@pytest.fixture
def register(client):
    """Factory fixture: register a traveler and return the response body."""
    async def _register(name, email, password="password123"):
        response = await client.post("/api/auth/register", json={
            "name": name,
            "email": email,
            "password": password
        })
        assert response.status_code == 201
        return response.json()
    return _register

@pytest.fixture
async def traveler(register):
    """Registered traveler; returns the register response (token + user)."""
    return await register("Ann Lee", "ann@example.com")

@pytest.fixture
async def other_traveler(register):
    return await register("Bob Kim", "bob@example.com")

@pytest.fixture
def trip_payload():
    return {
        "fullName": "Ann Lee",
        "email": "ann@example.com",
        "destination": "Accra",
        "departureCity": "Boston",
        "takeOffDay": "2025-06-01",
        "people": 2,
        "visaType": "Tourist"
    }

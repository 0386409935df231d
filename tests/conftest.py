# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stockwatch import models  # noqa: F401  registers tables on Base.metadata
from stockwatch.core.config import clear_settings_cache
from stockwatch.database import Base
from tests.mocks import MemoryInventoryStore, MockCatalog, MockChatSender, MockEmailSender, make_store

# In-memory SQLite shared across the connection pool for the duration of a test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WEBHOOK_SECRET = "test_webhook_secret"
ADMIN_PASSWORD = "test_admin_password"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Known secrets for every test; settings are re-read from the environment."""
    monkeypatch.setenv("SHOPIFY_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("BASIC_AUTH_USERNAME", "admin")
    monkeypatch.setenv("BASIC_AUTH_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("FALLBACK_SCAN_PAGE_SIZE", "250")
    monkeypatch.setenv("FALLBACK_SCAN_MAX_PAGES", "1")
    monkeypatch.setenv("ALERT_DEDUP_WINDOW_HOURS", "24")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(scope="function")
async def test_engine():
    """Create and configure the test database engine (function-scoped)."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Provide a database session for tests"""
    async_session_local = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session_local() as session:
        yield session
        await session.rollback()


@pytest.fixture
def memory_store():
    return MemoryInventoryStore()


@pytest.fixture
def catalog():
    return MockCatalog()


@pytest.fixture
def email_sender():
    return MockEmailSender()


@pytest.fixture
def chat_sender():
    return MockChatSender()


@pytest.fixture
async def free_store(memory_store):
    return await memory_store.save_store(make_store())


@pytest.fixture
async def pro_store(memory_store):
    return await memory_store.save_store(make_store(
        shop_domain="pro-shop.myshopify.com",
        plan="pro",
        chat_notifications=True,
        chat_webhook_url="https://hooks.slack.com/services/T000/B000/XXXX",
    ))

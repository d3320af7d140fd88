"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Test environment must be set before config is imported anywhere
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("WEBHOOK_CHECKOUT_STARTED_URL", "")
os.environ.setdefault("WEBHOOK_PURCHASE_COMPLETED_URL", "")
os.environ.setdefault("LOG_MASK_SECRETS", "true")


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False
    )

    # Import and create all tables
    from models import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    """Create test database session."""
    async with test_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def product():
    from models.product import ProductDTO
    return ProductDTO(id="prod-1", name="Vitamin D3", price=150.0, category="supplements", stock_quantity=10, status="active")


@pytest.fixture
def other_product():
    from models.product import ProductDTO
    return ProductDTO(id="prod-2", name="Omega 3", price=80.0, category="supplements", stock_quantity=5, status="active")


@pytest.fixture
def valid_contact():
    from models.checkout_session import CustomerContactDTO
    return CustomerContactDTO(
        name="Thandi Mokoena",
        email="thandi@example.co.za",
        phone="082 123 4567",
        address="12 Jacaranda Street",
        city="Pretoria",
        postal_code="0002",
    )


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def yesterday(now):
    return now - timedelta(days=1)

import os
from contextlib import contextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv

# Optional .env.test, e.g. to point TEST_DATABASE_URL at PostgreSQL
env_test_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

# Settings are read at import time by libs.db.config; a throwaway SQLite URL
# keeps the app importable without a real database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest_store_credit.db")
os.environ.setdefault("ENVIRONMENT", "local")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.store_credit_service import models as _store_credit_models  # noqa: F401

get_settings.cache_clear()


def make_admin_user(user_id: str = "admin-user") -> AuthUser:
    return AuthUser(user_id=user_id, email="admin@example.com", role="service_role")


def make_customer_user(user_id: str) -> AuthUser:
    return AuthUser(user_id=user_id, email="customer@example.com", role="authenticated")


@contextmanager
def override_auth(app, user: AuthUser | None):
    """Temporarily replace both auth dependencies with ``user``."""
    previous = {
        dep: app.dependency_overrides.get(dep)
        for dep in (get_current_user, get_optional_user)
    }
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user
    try:
        yield
    finally:
        for dep, override in previous.items():
            if override is None:
                app.dependency_overrides.pop(dep, None)
            else:
                app.dependency_overrides[dep] = override


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a fresh database per test.

    Defaults to a SQLite file under tmp_path; set TEST_DATABASE_URL to run
    against PostgreSQL instead.
    """
    db_url = os.environ.get("TEST_DATABASE_URL") or (
        f"sqlite+aiosqlite:///{tmp_path / 'store_credit.db'}"
    )
    engine = create_async_engine(db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def store_credit_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient against the store credit app, with DB and admin auth overridden.
    """
    from services.store_credit_service.app.main import app

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: make_admin_user()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Token codec with a controllable clock
- Fast bcrypt hasher and in-memory account store
- FastAPI test application wired to the in-memory store
- PostgreSQL pool for integration tests (skipped when unreachable)
"""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import run_migrations
from src.api.dependencies import get_password_hasher
from src.api.errors import register_exception_handlers
from src.api.v1.routes import router
from src.config.settings import get_settings
from src.domain.accounts import AccountService
from src.domain.passwords import PasswordHasher
from src.domain.tokens import TokenCodec

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def codec(clock: FrozenClock) -> TokenCodec:
    return TokenCodec(secret=TEST_SECRET, expires_in_seconds=3600, clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def service(
    repository: InMemoryAccountRepository, hasher: PasswordHasher, codec: TokenCodec
) -> AccountService:
    return AccountService(repository=repository, hasher=hasher, token_codec=codec)


@pytest.fixture
def app(repository: InMemoryAccountRepository, codec: TokenCodec, hasher: PasswordHasher) -> FastAPI:
    """Test application backed by the in-memory store."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(router)
    test_app.state.repository = repository
    test_app.state.token_codec = codec
    test_app.dependency_overrides[get_password_hasher] = lambda: hasher
    return test_app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def postgres_pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool against DATABASE_URL with migrations applied.

    Skips the requesting test when PostgreSQL is not reachable.
    """
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=False)
    try:
        pool.open(wait=True, timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable at DATABASE_URL")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_accounts(postgres_pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """Empty the accounts table before each test."""
    with postgres_pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield postgres_pool

"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
Every operation touches exactly one row, so no multi-statement
transactions are needed:

1. **create_account**: INSERT ... ON CONFLICT DO NOTHING. The unique
   indexes on username and lower(email) decide registration races;
   exactly one of two concurrent inserts returns a row.

2. **get_by_email / get_by_id**: single-row reads.

3. **save_profile**: single-row UPDATE that merges the JSONB profile and
   sets profile_setup_complete = TRUE. The flag is never written back
   to FALSE.
"""

import logging
import uuid
from pathlib import Path
from typing import Any

from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.ports import Account, AccountRecord, Role

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = "id, username, email, role, profile_setup_complete, profile, created_at, updated_at"


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=str(row[0]),
        username=row[1],
        email=row[2],
        role=Role(row[3]),
        profile_setup_complete=row[4],
        profile=dict(row[5] or {}),
        created_at=row[6],
        updated_at=row[7],
    )


def _parse_id(account_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(account_id)
    except (ValueError, TypeError, AttributeError):
        return None


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create_account(
        self, username: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        """
        Atomically insert a new account.

        ON CONFLICT DO NOTHING without a target covers both unique indexes,
        so a duplicate username or email yields no row instead of an error.

        Returns:
            The created Account, or None if username or email is taken
        """
        sql = f"""
            INSERT INTO accounts (username, email, password_hash, role)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (username, email, password_hash, Role(role).value))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return _row_to_account(row)

    def get_by_email(self, email: str) -> AccountRecord | None:
        """Fetch account and password hash by normalized email."""
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS}, password_hash
            FROM accounts
            WHERE lower(email) = lower(%s)
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        return AccountRecord(account=_row_to_account(row), password_hash=row[8])

    def get_by_id(self, account_id: str) -> Account | None:
        """Fetch public account projection by id."""
        key = _parse_id(account_id)
        if key is None:
            return None

        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (key,))
            row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_account(row)

    def save_profile(self, account_id: str, fields: dict[str, Any]) -> Account | None:
        """
        Merge profile fields and mark the profile complete in one UPDATE.

        Returns:
            The updated Account, or None if no such account exists
        """
        key = _parse_id(account_id)
        if key is None:
            return None

        sql = f"""
            UPDATE accounts
            SET profile = profile || %s,
                profile_setup_complete = TRUE,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (Jsonb(fields), key))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return _row_to_account(row)

    def ping(self) -> None:
        """Validate database connectivity."""
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

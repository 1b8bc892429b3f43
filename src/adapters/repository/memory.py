"""
In-memory repository adapter - Implements AccountRepository protocol.

Keeps accounts in process-local dicts behind a single lock. The lock
gives the same guarantees as the PostgreSQL unique indexes: of two
concurrent registrations for one email, exactly one succeeds.

Intended for local development (STORE_BACKEND=memory) and tests.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from src.domain.ports import Account, AccountRecord, Role


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with dicts.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, AccountRecord] = {}
        self._ids_by_email: dict[str, str] = {}
        self._ids_by_username: dict[str, str] = {}

    def create_account(
        self, username: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        email_key = email.lower()
        with self._lock:
            if email_key in self._ids_by_email or username in self._ids_by_username:
                return None

            now = datetime.now(timezone.utc)
            account = Account(
                id=str(uuid.uuid4()),
                username=username,
                email=email,
                role=Role(role),
                profile_setup_complete=False,
                profile={},
                created_at=now,
                updated_at=now,
            )
            self._records[account.id] = AccountRecord(account=account, password_hash=password_hash)
            self._ids_by_email[email_key] = account.id
            self._ids_by_username[username] = account.id
            return account

    def get_by_email(self, email: str) -> AccountRecord | None:
        with self._lock:
            account_id = self._ids_by_email.get(email.lower())
            if account_id is None:
                return None
            return self._records[account_id]

    def get_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            record = self._records.get(account_id)
            return record.account if record else None

    def save_profile(self, account_id: str, fields: dict[str, Any]) -> Account | None:
        with self._lock:
            record = self._records.get(account_id)
            if record is None:
                return None

            account = replace(
                record.account,
                profile={**record.account.profile, **fields},
                profile_setup_complete=True,
                updated_at=datetime.now(timezone.utc),
            )
            self._records[account_id] = replace(record, account=account)
            return account

    def ping(self) -> None:
        return None

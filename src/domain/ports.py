"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types that cross them. Adapters
implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class Role(str, Enum):
    """Closed set of account roles chosen at registration."""

    FREELANCER = "freelancer"
    CLIENT = "client"


@dataclass(frozen=True)
class Account:
    """
    Public projection of an account record.

    Carries no password hash, so it is safe to serialize to any caller.
    """

    id: str
    username: str
    email: str
    role: Role
    profile_setup_complete: bool = False
    profile: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class AccountRecord:
    """Stored account together with its password hash. Never leaves the domain."""

    account: Account
    password_hash: str


@dataclass(frozen=True)
class Identity:
    """Identity facts embedded in a token at login time."""

    id: str
    username: str
    role: Role
    profile_setup_complete: bool


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def create_account(
        self, username: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        """
        Atomically insert a new account with profile_setup_complete = False.

        Args:
            username: Trimmed username
            email: Normalized email address (lowercase, stripped)
            password_hash: bcrypt hashed password
            role: Account role

        Returns:
            The created Account, or None if the username or email is taken
        """
        ...

    def get_by_email(self, email: str) -> AccountRecord | None:
        """Fetch an account and its password hash by normalized email."""
        ...

    def get_by_id(self, account_id: str) -> Account | None:
        """Fetch the public projection of an account by id."""
        ...

    def save_profile(self, account_id: str, fields: dict[str, Any]) -> Account | None:
        """
        Merge profile fields into one account and mark its profile complete.

        Single-document update. The completion flag only moves from False
        to True; later saves leave it True.

        Returns:
            The updated Account, or None if no such account exists
        """
        ...

    def ping(self) -> None:
        """Raise if the store is unreachable."""
        ...

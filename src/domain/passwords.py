"""
Password hashing service - bcrypt hash and verify.

bcrypt's comparison is constant-time and its cost factor dominates
response time. verify() fails closed: a malformed stored hash yields
False instead of raising into the login flow.
"""

from dataclasses import dataclass
from functools import lru_cache

import bcrypt


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    """Hash compared against when an email is unknown, built at the live cost."""
    return bcrypt.hashpw(b"swipe_dummy_password_for_timing", bcrypt.gensalt(rounds)).decode()


@dataclass(frozen=True)
class PasswordHasher:
    """bcrypt-backed one-way password hashing."""

    rounds: int = 10

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt."""
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Return True only if plaintext matches the stored hash."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def burn(self, plaintext: str) -> None:
        """Run one comparison against the dummy hash and discard the result."""
        self.verify(plaintext, _dummy_hash(self.rounds))

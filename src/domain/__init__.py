"""
Domain layer - Pure business logic with zero web-framework imports.

This package contains the credential and session core: password hashing,
token issuance and verification, registration, login and the profile
completion flag. It defines its own port interfaces for infrastructure
abstraction, ensuring hexagonal architecture decoupling.
"""

from .accounts import AccountService
from .exceptions import (
    AuthError,
    ConfigurationError,
    ConflictError,
    ProfileNotFound,
    UnauthorizedError,
    ValidationError,
)
from .passwords import PasswordHasher
from .ports import Account, AccountRecord, AccountRepository, Identity, Role
from .tokens import TokenClaims, TokenCodec, read_unverified_claims

__all__ = [
    "Account",
    "AccountRecord",
    "AccountRepository",
    "AccountService",
    "AuthError",
    "ConfigurationError",
    "ConflictError",
    "Identity",
    "PasswordHasher",
    "ProfileNotFound",
    "Role",
    "TokenClaims",
    "TokenCodec",
    "UnauthorizedError",
    "ValidationError",
    "read_unverified_claims",
]

"""
Domain exceptions - Semantic error types for the credential core.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each class to exactly one HTTP status.
"""


class AuthError(Exception):
    """Base class for credential and session domain errors."""

    pass


class ValidationError(AuthError):
    """Missing or malformed input (400)."""

    pass


class ConflictError(AuthError):
    """Username or email already registered (409)."""

    pass


class UnauthorizedError(AuthError):
    """
    Bad credential or missing/malformed/expired/forged token (401).

    The message is deliberately generic. Callers must never learn which
    check failed.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(AuthError):
    """Server misconfiguration such as a missing signing secret (500)."""

    pass


class ProfileNotFound(AuthError):
    """Verified identity refers to an account that no longer exists (404)."""

    pass

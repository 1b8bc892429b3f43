"""
Token codec - signed, time-bounded bearer tokens.

Tokens are HS256 JWTs (python-jose) signed with a server-held secret.
The payload is a closed claims set:

    {"id", "username", "role", "profileSetupComplete", "iat", "exp"}

parse() checks in a fixed order and fails closed at every step:

1. Structure and signature (jose) - forged or mangled tokens stop here.
2. Expiry against the codec clock.
3. Structural validation of the payload into TokenClaims. A correctly
   signed token with missing or mistyped claims is still rejected.

Every failure becomes the same UnauthorizedError. The reason is only
logged at DEBUG.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from jose import JWTError, jwt

from .exceptions import ConfigurationError, UnauthorizedError
from .ports import Identity, Role

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid or missing token"

_CLAIM_KEYS = frozenset({"id", "username", "role", "profileSetupComplete", "iat", "exp"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    """Claims recovered from a token whose signature and expiry both checked out."""

    id: str
    username: str
    role: Role
    profile_setup_complete: bool
    issued_at: int
    expires_at: int

    @property
    def identity(self) -> Identity:
        return Identity(
            id=self.id,
            username=self.username,
            role=self.role,
            profile_setup_complete=self.profile_setup_complete,
        )

    def to_dict(self) -> dict[str, Any]:
        """External claims shape consumed by clients."""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
            "profileSetupComplete": self.profile_setup_complete,
            "issuedAt": self.issued_at,
            "expiry": self.expires_at,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "TokenClaims":
        """
        Validate a decoded payload into TokenClaims.

        Raises:
            ValueError: If any claim is missing, unexpected or mistyped
        """
        if not isinstance(payload, dict):
            raise ValueError("payload is not an object")
        if set(payload) != _CLAIM_KEYS:
            raise ValueError("unexpected claim set")

        account_id = payload["id"]
        username = payload["username"]
        complete = payload["profileSetupComplete"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]

        if not isinstance(account_id, str) or not account_id:
            raise ValueError("id must be a non-empty string")
        if not isinstance(username, str) or not username:
            raise ValueError("username must be a non-empty string")
        if not isinstance(complete, bool):
            raise ValueError("profileSetupComplete must be a boolean")
        for name, value in (("iat", issued_at), ("exp", expires_at)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer timestamp")
        if expires_at <= issued_at:
            raise ValueError("exp must be after iat")

        return cls(
            id=account_id,
            username=username,
            role=Role(payload["role"]),
            profile_setup_complete=complete,
            issued_at=issued_at,
            expires_at=expires_at,
        )


class TokenCodec:
    """
    Issues and parses signed tokens.

    The secret is fixed at construction and never mutated, so one codec
    can be shared by concurrent requests without locking.
    """

    def __init__(
        self,
        secret: str,
        expires_in_seconds: int = 3600,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ConfigurationError("JWT signing secret is not configured")
        if expires_in_seconds <= 0:
            raise ConfigurationError("Token lifetime must be positive")
        self._secret = secret
        self._expires_in_seconds = expires_in_seconds
        self._algorithm = algorithm
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock().timestamp())

    def issue(self, identity: Identity, expires_in: int | None = None) -> str:
        """
        Encode identity plus issued-at and expiry into a signed token.

        Args:
            identity: Claims to embed
            expires_in: Lifetime in seconds (defaults to the configured lifetime)

        Returns:
            Compact JWT string
        """
        lifetime = self._expires_in_seconds if expires_in is None else expires_in
        issued_at = self._now()
        payload = {
            "id": identity.id,
            "username": identity.username,
            "role": Role(identity.role).value,
            "profileSetupComplete": identity.profile_setup_complete,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def parse(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            UnauthorizedError: On malformed structure, bad signature,
                expiry in the past, or claims that fail validation
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked below against the codec clock.
                options={"verify_exp": False, "require_iat": True, "require_exp": True},
            )
        except (JWTError, AttributeError, TypeError, ValueError) as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            raise UnauthorizedError(INVALID_TOKEN) from None

        expires_at = payload.get("exp")
        if not isinstance(expires_at, int) or isinstance(expires_at, bool) or expires_at <= self._now():
            logger.debug("Token rejected: expired")
            raise UnauthorizedError(INVALID_TOKEN)

        try:
            return TokenClaims.from_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Token rejected: bad claims (%s)", e)
            raise UnauthorizedError(INVALID_TOKEN) from None


def read_unverified_claims(token: str) -> TokenClaims:
    """
    Decode claims without checking the signature.

    For client-side navigation only: the client does not hold the secret,
    and the server re-verifies the token on every protected request.

    Raises:
        UnauthorizedError: If the token cannot be decoded or its claims are malformed
    """
    try:
        return TokenClaims.from_payload(jwt.get_unverified_claims(token))
    except (JWTError, KeyError, ValueError, AttributeError, TypeError):
        raise UnauthorizedError(INVALID_TOKEN) from None

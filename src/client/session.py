"""
Client session - post-login navigation state machine.

Session States
==============

- UNAUTHENTICATED: No token held
- AUTHENTICATED_INCOMPLETE: Token held, profile setup not done
- AUTHENTICATED_COMPLETE: Token held, profile setup done

Transitions:
    UNAUTHENTICATED -> AUTHENTICATED_*            (login; chosen by the token's claim)
    AUTHENTICATED_INCOMPLETE -> AUTHENTICATED_COMPLETE  (successful profile save)
    AUTHENTICATED_* -> UNAUTHENTICATED            (logout; token discarded)

The state only picks a UI destination. It reads claims without verifying
the signature, so it is not a security boundary: the server verifies the
token on every protected request.
"""

import logging
from enum import Enum

from src.domain.tokens import TokenClaims, read_unverified_claims

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_INCOMPLETE = "authenticated_incomplete"
    AUTHENTICATED_COMPLETE = "authenticated_complete"


DESTINATIONS = {
    SessionState.UNAUTHENTICATED: "/login",
    SessionState.AUTHENTICATED_INCOMPLETE: "/profile/edit",
    SessionState.AUTHENTICATED_COMPLETE: "/profile",
}


class SessionError(Exception):
    """Transition not allowed from the current state."""

    pass


class NavigationSession:
    """Holds the bearer token and derives where the UI should go next."""

    def __init__(self) -> None:
        self._token: str | None = None
        self._claims: TokenClaims | None = None
        self._state = SessionState.UNAUTHENTICATED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def claims(self) -> TokenClaims | None:
        return self._claims

    @property
    def is_authenticated(self) -> bool:
        return self._state is not SessionState.UNAUTHENTICATED

    @property
    def destination(self) -> str:
        return DESTINATIONS[self._state]

    def login(self, token: str) -> SessionState:
        """
        Adopt a freshly issued token.

        Raises:
            UnauthorizedError: If the token's claims cannot be read
        """
        claims = read_unverified_claims(token)
        self._token = token
        self._claims = claims
        if claims.profile_setup_complete:
            self._state = SessionState.AUTHENTICATED_COMPLETE
        else:
            self._state = SessionState.AUTHENTICATED_INCOMPLETE
        logger.debug("Session for %s is %s", claims.username, self._state.value)
        return self._state

    def mark_profile_setup_complete(self) -> SessionState:
        """
        Record a successful profile save.

        The held token is not replaced, so its claim stays stale until the
        next login.
        """
        if self._state is SessionState.UNAUTHENTICATED:
            raise SessionError("Cannot complete profile setup without a session")
        self._state = SessionState.AUTHENTICATED_COMPLETE
        return self._state

    def logout(self) -> SessionState:
        """Discard the token. No server call is needed."""
        self._token = None
        self._claims = None
        self._state = SessionState.UNAUTHENTICATED
        return self._state

    def auth_headers(self) -> dict[str, str]:
        if self._token is None:
            raise SessionError("Not logged in")
        return {"Authorization": f"Bearer {self._token}"}

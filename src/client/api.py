"""
HTTP client for the account API.

Wraps an httpx.Client and keeps a NavigationSession in step with the
calls it makes. Any httpx.Client works, including FastAPI's TestClient.
"""

import logging
from typing import Any

import httpx

from .session import NavigationSession, SessionState

logger = logging.getLogger(__name__)


class SwipeClient:
    """Register, log in and save a profile against the account API."""

    def __init__(self, http: httpx.Client, session: NavigationSession | None = None) -> None:
        self._http = http
        self.session = session or NavigationSession()

    def register(self, username: str, email: str, password: str, role: str) -> dict[str, Any]:
        """
        Create an account. Does not log in.

        Raises:
            httpx.HTTPStatusError: 400 on bad input, 409 on duplicate identity
        """
        response = self._http.post(
            "/register",
            json={"username": username, "email": email, "password": password, "role": role},
        )
        response.raise_for_status()
        return response.json()

    def login(self, email: str, password: str) -> SessionState:
        """
        Log in and move the session to the matching authenticated state.

        Raises:
            httpx.HTTPStatusError: 401 on bad credentials
        """
        response = self._http.post("/login", json={"email": email, "password": password})
        response.raise_for_status()
        return self.session.login(response.json()["token"])

    def get_profile(self) -> dict[str, Any]:
        response = self._http.get("/profile/me", headers=self.session.auth_headers())
        response.raise_for_status()
        return response.json()

    def save_profile(self, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Save profile fields; on success the session becomes AUTHENTICATED_COMPLETE.

        Raises:
            httpx.HTTPStatusError: 401 if the token was rejected, 400 on bad fields
        """
        response = self._http.put("/profile", json=fields, headers=self.session.auth_headers())
        response.raise_for_status()
        self.session.mark_profile_setup_complete()
        logger.info("Profile saved; session is %s", self.session.state.value)
        return response.json()

    def logout(self) -> SessionState:
        return self.session.logout()

"""Client-side consumers of the account API: navigation session and HTTP wrapper."""

from .api import SwipeClient
from .session import DESTINATIONS, NavigationSession, SessionError, SessionState

__all__ = ["DESTINATIONS", "NavigationSession", "SessionError", "SessionState", "SwipeClient"]

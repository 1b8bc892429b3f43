"""
API v1 package.

Contains the account, login and profile routes.
"""

from src.api.v1.routes import router

__all__ = ["router"]

"""Client-side helpers for the authentication API."""

from .session import AuthSession, SessionExpiredError

__all__ = ["AuthSession", "SessionExpiredError"]

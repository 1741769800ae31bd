"""Authentication module for credential and token handling."""

from .exceptions import (
    AuthServiceError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    InternalError,
)
from .jwt_handler import JWTHandler, utc_now
from .password_handler import PasswordHandler
from .service import AuthService

__all__ = [
    # Errors
    "AuthServiceError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "InternalError",
    # Credential verifier
    "PasswordHandler",
    # Token engine
    "JWTHandler",
    "utc_now",
    # Flows
    "AuthService",
]

"""Error taxonomy shared by the service layer and the HTTP surface."""
from typing import Optional


class AuthServiceError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail, "error_code": self.error_code}


class ValidationError(AuthServiceError):
    """Missing or malformed caller input."""
    status_code = 400
    error_code = "validation_error"
    default_detail = "Invalid request"


class ConflictError(AuthServiceError):
    status_code = 409
    error_code = "email_exists"
    default_detail = "Email already registered"


class AuthenticationError(AuthServiceError):
    """Bad credentials or an unusable token. Never says which check failed."""
    status_code = 401
    error_code = "authentication_failed"
    default_detail = "Invalid credentials"


class InternalError(AuthServiceError):
    """Storage, hashing or signing failure. Detail stays generic for callers."""

    def __init__(self):
        super().__init__(self.default_detail)

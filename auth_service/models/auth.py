"""Authentication request, response and token models."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .user import UserPublic


class TokenClass(str, Enum):
    """Discriminator stored in the `type` claim."""
    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Verified payload of a token. A snapshot taken at issuance."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    token_class: TokenClass
    issued_at: datetime
    expires_at: datetime
    token_id: str


class TokenPair(BaseModel):
    """Access and refresh token issued together."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    issued_at: datetime = Field(..., description="Shared issuance timestamp")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    refresh_expires_in: int = Field(..., description="Refresh token lifetime in seconds")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "issued_at": "2024-01-01T00:00:00Z",
                "expires_in": 900,
                "refresh_expires_in": 604800,
            }
        }
    )


class AuthResult(BaseModel):
    """Outcome of a successful registration or login."""
    user: UserPublic
    tokens: TokenPair


# ----- Request bodies -----
# Fields are optional so that missing values reach the service and are
# reported as 400 validation errors instead of framework 422s.

class RegisterRequest(BaseModel):
    """Registration request model."""
    email: Optional[EmailStr] = Field(None, description="User email address")
    password: Optional[str] = Field(None, description="User password")
    name: Optional[str] = Field(None, max_length=100, description="Display name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "a@x.com", "password": "pw123", "name": "Al"}
        }
    )


class LoginRequest(BaseModel):
    """Login request model."""
    email: Optional[EmailStr] = Field(None, description="User email address")
    password: Optional[str] = Field(None, description="User password")

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "a@x.com", "password": "pw123"}}
    )


class RefreshTokenRequest(BaseModel):
    """Refresh token request model."""
    refresh_token: Optional[str] = Field(None, description="JWT refresh token")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."}
        }
    )


# ----- Response bodies -----

class AuthResponse(BaseModel):
    """Registration/login response model."""
    message: str
    user: UserPublic
    tokens: TokenPair


class RefreshResponse(BaseModel):
    """Token rotation response model."""
    message: str = Field(default="Token refreshed")
    tokens: TokenPair


class ProfileResponse(BaseModel):
    """Claims carried by a valid access token."""
    user_id: str = Field(..., description="User ID")
    email: str = Field(..., description="User email")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"user_id": "3f1c2a0e9b8d4c7aa1e2f3b4c5d6e7f8", "email": "a@x.com"}
        }
    )


class AuthErrorResponse(BaseModel):
    """Authentication error response model."""
    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Specific error code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"detail": "Invalid credentials", "error_code": "authentication_failed"}
        }
    )

"""User models for registration and credential storage."""
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Canonical form used as the login key and for uniqueness."""
    return email.strip().lower()


class UserRecord(BaseModel):
    """User record as persisted in the user store."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_id": "3f1c2a0e9b8d4c7aa1e2f3b4c5d6e7f8",
                "email": "a@x.com",
                "name": "Al",
            }
        },
    )

    user_id: str = Field(default_factory=lambda: uuid4().hex, alias="_id", description="Opaque user identifier")
    email: str = Field(..., description="Normalized, unique login email")
    password_hash: str = Field(..., repr=False, description="bcrypt hash of the password")
    name: str = Field(default="", max_length=100, description="Display name")
    created_at: datetime = Field(default_factory=_utcnow, description="Account creation timestamp")
    updated_at: datetime = Field(default_factory=_utcnow, description="Last update timestamp")

    @classmethod
    def create(cls, email: str, password_hash: str, name: str | None = None) -> "UserRecord":
        now = _utcnow()
        return cls(
            email=normalize_email(email),
            password_hash=password_hash,
            name=name or "",
            created_at=now,
            updated_at=now,
        )

    def to_document(self) -> dict:
        """Mongo document, keyed by `_id`."""
        return self.model_dump(by_alias=True)

    def to_public(self) -> "UserPublic":
        return UserPublic(user_id=self.user_id, email=self.email, name=self.name)


class UserPublic(BaseModel):
    """User fields safe to return to callers (no credential material)."""
    user_id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    name: str = Field(default="", description="Display name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "3f1c2a0e9b8d4c7aa1e2f3b4c5d6e7f8",
                "email": "a@x.com",
                "name": "Al",
            }
        }
    )

"""Configuration management for the authentication service."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import (
    AliasChoices,
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from the package directory, if present
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Settings(BaseSettings):
    """Application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # JWT
    jwt_secret: Optional[SecretStr] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_minutes: int = Field(default=15)
    jwt_refresh_token_expire_days: int = Field(default=7)

    # Password hashing
    password_hash_rounds: int = Field(default=10)
    password_hash_timeout_seconds: float = Field(default=5.0)

    # User store
    # Canonical MONGO_URI, with MONGODB_URI accepted as fallback
    mongo_uri: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("mongo_uri", "mongodb_uri")
    )
    mongo_database_name: str = Field(default="auth_service_db")
    mongo_users_collection: str = Field(default="users")
    mongo_max_pool_size: int = Field(default=100)
    mongo_timeout_ms: int = Field(default=5000)
    user_store_timeout_seconds: float = Field(default=5.0)

    # CORS (string or list to avoid parse errors with CSV env values)
    cors_origins: Union[str, List[str]] = Field(default=["*"])
    cors_max_age: int = Field(default=3600)

    # App
    app_title: str = Field(default="Auth Service API")
    app_description: str = Field(default="Registration, login and token lifecycle API")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Logging
    log_level: str = Field(default="INFO")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v

    @field_validator("password_hash_rounds")
    @classmethod
    def validate_password_hash_rounds(cls, v):
        # bcrypt accepts cost factors 4..31
        if not 4 <= v <= 31:
            raise ValueError("Password hash rounds must be between 4 and 31")
        return v

    @field_validator(
        "jwt_access_token_expire_minutes",
        "jwt_refresh_token_expire_days",
        "password_hash_timeout_seconds",
        "user_store_timeout_seconds",
    )
    @classmethod
    def validate_positive(cls, v, info: ValidationInfo):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v):
        # Normalize: empty string -> empty list, simple CSV -> list
        if isinstance(v, str):
            v_str = v.strip()
            if v_str == "":
                v = []
            elif "," in v_str and not v_str.startswith("["):
                v = [origin.strip() for origin in v_str.split(",") if origin.strip()]
            else:
                v = [v_str]
        return v

    @model_validator(mode="after")
    def validate_production(self):
        if self.environment != "production":
            return self
        if any(origin == "*" for origin in (self.cors_origins or [])):
            raise ValueError("Wildcard CORS origin (*) not allowed in production")
        secret_value = self.jwt_secret.get_secret_value() if self.jwt_secret is not None else ""
        if not secret_value.strip():
            raise ValueError("JWT_SECRET must be set in production")
        return self

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.jwt_access_token_expire_minutes * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.jwt_refresh_token_expire_days * 24 * 60 * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Application settings object, built once per process.
    """
    return Settings()

"""Registration, login, profile and refresh flows.

Each operation has exactly one code path. Caller input problems raise
``ValidationError``/``ConflictError`` with a specific message; every
credential or token failure raises the same ``AuthenticationError``;
store, hashing and timeout failures are logged here and surface as an
opaque ``InternalError``.
"""
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar
from uuid import uuid4

from auth_service.config import Settings
from auth_service.database.user_repository import UserRepository
from auth_service.models.auth import AuthResult, TokenClaims, TokenClass, TokenPair
from auth_service.models.user import UserRecord, normalize_email

from .exceptions import AuthenticationError, ConflictError, InternalError, ValidationError
from .jwt_handler import JWTHandler
from .password_handler import MAX_PASSWORD_BYTES, PasswordHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_TOKEN = "Invalid or expired token"
MAX_NAME_LENGTH = 100


def _require(value: Optional[str], field: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing required field: {field}")
    return value


class AuthService:
    def __init__(
        self,
        user_repository: UserRepository,
        password_handler: PasswordHandler,
        jwt_handler: JWTHandler,
        settings: Settings,
    ):
        self.user_repository = user_repository
        self.password_handler = password_handler
        self.jwt_handler = jwt_handler
        self.store_timeout = settings.user_store_timeout_seconds
        self.hash_timeout = settings.password_hash_timeout_seconds
        # Verified against on unknown emails so both login failures cost one bcrypt check
        self._dummy_hash = password_handler.hash_password(uuid4().hex)

    # ------ Bounded I/O helpers ------

    async def _store_call(self, awaitable: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.store_timeout)
        except asyncio.TimeoutError:
            logger.error(f"User store timed out during {operation} after {self.store_timeout}s")
            raise InternalError()
        except Exception as e:
            logger.error(f"User store failure during {operation}: {e}", exc_info=True)
            raise InternalError()

    async def _hash(self, password: str) -> str:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.password_handler.hash_password, password),
                timeout=self.hash_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Password hashing timed out after {self.hash_timeout}s")
            raise InternalError()
        except RuntimeError as e:
            logger.error(f"Password hashing failed: {e}", exc_info=True)
            raise InternalError()

    async def _verify(self, password: str, password_hash: str) -> bool:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.password_handler.verify_password, password, password_hash),
                timeout=self.hash_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Password verification timed out after {self.hash_timeout}s")
            raise InternalError()

    # ------ Operations ------

    async def register(self, email: Optional[str], password: Optional[str],
                       name: Optional[str] = None) -> AuthResult:
        email = normalize_email(_require(email, "email"))
        password = _require(password, "password")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
        if name is not None and len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name cannot exceed {MAX_NAME_LENGTH} characters")

        password_hash = await self._hash(password)
        user = UserRecord.create(email=email, password_hash=password_hash, name=name)

        inserted = await self._store_call(self.user_repository.insert(user), "register")
        if not inserted:
            logger.info("Registration rejected: email already registered")
            raise ConflictError("Email already registered")

        logger.info(f"User registered: {user.user_id}")
        return AuthResult(user=user.to_public(), tokens=self.jwt_handler.issue(user.user_id, user.email))

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        email = normalize_email(_require(email, "email"))
        password = _require(password, "password")

        user = await self._store_call(self.user_repository.find_by_email(email), "login")
        if user is None:
            await self._verify(password, self._dummy_hash)
            logger.warning("Login attempt with unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await self._verify(password, user.password_hash):
            logger.warning(f"Invalid password for user: {user.user_id}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if self.password_handler.needs_update(user.password_hash):
            logger.info(f"Password hash for user {user.user_id} uses an outdated work factor")

        logger.info(f"Successful login for user: {user.user_id}")
        return AuthResult(user=user.to_public(), tokens=self.jwt_handler.issue(user.user_id, user.email))

    def get_profile(self, access_token: Optional[str]) -> TokenClaims:
        claims = self.jwt_handler.validate(access_token, TokenClass.ACCESS) if access_token else None
        if claims is None:
            raise AuthenticationError(INVALID_TOKEN)
        return claims

    def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        refresh_token = _require(refresh_token, "refresh_token")
        tokens = self.jwt_handler.rotate(refresh_token)
        if tokens is None:
            logger.warning("Refresh rejected")
            raise AuthenticationError(INVALID_TOKEN)
        return tokens

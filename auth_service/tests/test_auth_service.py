import asyncio
import time

import pytest

from auth_service.auth.exceptions import (
    AuthenticationError,
    ConflictError,
    InternalError,
    ValidationError,
)
from auth_service.auth.password_handler import PasswordHandler
from auth_service.auth.service import AuthService
from auth_service.database.user_repository import InMemoryUserRepository
from auth_service.models.auth import TokenClass


class FailingUserRepository(InMemoryUserRepository):
    async def insert(self, user):
        raise ConnectionError("connection refused by mongo.internal:27017")

    async def find_by_email(self, email):
        raise ConnectionError("connection refused by mongo.internal:27017")


class SlowUserRepository(InMemoryUserRepository):
    async def find_by_email(self, email):
        await asyncio.sleep(1)
        return None


class SlowPasswordHandler(PasswordHandler):
    delay = 0.0

    def hash_password(self, password):
        time.sleep(self.delay)
        return super().hash_password(password)

    def verify_password(self, plain_password, hashed_password):
        time.sleep(self.delay)
        return super().verify_password(plain_password, hashed_password)


@pytest.mark.asyncio
async def test_register_then_login_returns_same_user(auth_service, jwt_handler):
    registered = await auth_service.register("a@example.com", "pw123", "Al")
    logged_in = await auth_service.login("a@example.com", "pw123")

    assert registered.user.user_id == logged_in.user.user_id
    assert registered.user.name == "Al"
    claims = jwt_handler.validate(logged_in.tokens.access_token, TokenClass.ACCESS)
    assert claims.user_id == registered.user.user_id


@pytest.mark.asyncio
async def test_register_stores_hash_not_plaintext(auth_service, user_repository):
    result = await auth_service.register("a@example.com", "pw123")
    record = await user_repository.find_by_id(result.user.user_id)
    assert record.password_hash != "pw123"
    assert record.password_hash.startswith("$2b$")
    assert record.name == ""
    assert record.created_at == record.updated_at
    assert "password_hash" not in result.user.model_dump()


@pytest.mark.asyncio
async def test_register_normalizes_email(auth_service):
    result = await auth_service.register("  A@Example.COM ", "pw123")
    assert result.user.email == "a@example.com"
    login = await auth_service.login("a@example.com", "pw123")
    assert login.user.user_id == result.user.user_id


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(auth_service, user_repository):
    await auth_service.register("a@example.com", "pw123")
    with pytest.raises(ConflictError):
        await auth_service.register("A@example.com", "other-password")
    assert len(user_repository) == 1


@pytest.mark.asyncio
async def test_concurrent_registrations_create_one_record(auth_service, user_repository):
    results = await asyncio.gather(
        *(auth_service.register("race@example.com", f"pw-{i}") for i in range(5)),
        return_exceptions=True,
    )
    successes = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == 4
    assert len(user_repository) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("email, password", [
    (None, "pw123"),
    ("a@example.com", None),
    ("", "pw123"),
    ("a@example.com", "   "),
])
async def test_register_missing_fields(auth_service, email, password):
    with pytest.raises(ValidationError):
        await auth_service.register(email, password)


@pytest.mark.asyncio
async def test_register_rejects_overlong_password(auth_service):
    with pytest.raises(ValidationError):
        await auth_service.register("a@example.com", "x" * 73)


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_the_same(auth_service):
    await auth_service.register("a@example.com", "pw123")

    with pytest.raises(AuthenticationError) as wrong_password:
        await auth_service.login("a@example.com", "nope")
    with pytest.raises(AuthenticationError) as unknown_email:
        await auth_service.login("nobody@example.com", "pw123")

    assert wrong_password.value.detail == unknown_email.value.detail == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_email_still_runs_bcrypt(auth_service, password_handler, monkeypatch):
    checked = []
    verify = password_handler.verify_password

    def recording_verify(plain_password, hashed_password):
        checked.append(hashed_password)
        return verify(plain_password, hashed_password)

    monkeypatch.setattr(password_handler, "verify_password", recording_verify)

    with pytest.raises(AuthenticationError):
        await auth_service.login("nobody@example.com", "pw123")

    assert len(checked) == 1
    assert checked[0].startswith("$2b$04$")


@pytest.mark.asyncio
async def test_login_missing_fields(auth_service):
    with pytest.raises(ValidationError):
        await auth_service.login("a@example.com", "")


@pytest.mark.asyncio
async def test_store_failure_is_internal_error(password_handler, jwt_handler, settings, caplog):
    service = AuthService(FailingUserRepository(), password_handler, jwt_handler, settings)

    with pytest.raises(InternalError) as exc_info:
        await service.register("a@example.com", "pw123")
    assert exc_info.value.detail == "Internal server error"
    assert "mongo.internal" not in exc_info.value.detail
    assert "mongo.internal" in caplog.text

    with pytest.raises(InternalError):
        await service.login("a@example.com", "pw123")


@pytest.mark.asyncio
async def test_store_timeout_is_internal_error(password_handler, jwt_handler, settings):
    fast_timeout = settings.model_copy(update={"user_store_timeout_seconds": 0.05})
    service = AuthService(SlowUserRepository(), password_handler, jwt_handler, fast_timeout)
    with pytest.raises(InternalError):
        await service.login("a@example.com", "pw123")


@pytest.mark.asyncio
async def test_get_profile_and_refresh(auth_service, clock):
    result = await auth_service.register("a@example.com", "pw123")

    claims = auth_service.get_profile(result.tokens.access_token)
    assert claims.email == "a@example.com"

    with pytest.raises(AuthenticationError):
        auth_service.get_profile(result.tokens.refresh_token)

    rotated = auth_service.refresh(result.tokens.refresh_token)
    assert auth_service.get_profile(rotated.access_token).user_id == result.user.user_id

    with pytest.raises(AuthenticationError):
        auth_service.refresh(result.tokens.access_token)
    with pytest.raises(ValidationError):
        auth_service.refresh(None)

    clock.advance(minutes=15)
    with pytest.raises(AuthenticationError) as expired:
        auth_service.get_profile(result.tokens.access_token)
    with pytest.raises(AuthenticationError) as missing:
        auth_service.get_profile(None)
    assert expired.value.detail == missing.value.detail


@pytest.mark.asyncio
async def test_password_hashing_timeout_is_internal_error(jwt_handler, settings, caplog):
    fast_timeout = settings.model_copy(update={"password_hash_timeout_seconds": 0.05})
    handler = SlowPasswordHandler(rounds=settings.password_hash_rounds)
    service = AuthService(InMemoryUserRepository(), handler, jwt_handler, fast_timeout)
    await service.register("a@example.com", "pw123")

    handler.delay = 0.3
    with pytest.raises(InternalError):
        await service.register("b@example.com", "pw123")
    assert "Password hashing timed out" in caplog.text

    with pytest.raises(InternalError):
        await service.login("a@example.com", "pw123")
    assert "Password verification timed out" in caplog.text

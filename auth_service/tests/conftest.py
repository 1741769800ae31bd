from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth_service.api.app import create_app
from auth_service.auth.jwt_handler import JWTHandler
from auth_service.auth.password_handler import PasswordHandler
from auth_service.auth.service import AuthService
from auth_service.config import Settings
from auth_service.database.user_repository import InMemoryUserRepository

TEST_SECRET = "a-very-secret-key-for-testing-jwt-tokens"


class FrozenClock:
    """Manually advanced time source for the token engine."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings() -> Settings:
    # Lowest bcrypt cost keeps the suite fast
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        password_hash_rounds=4,
        environment="testing",
        log_level="DEBUG",
        mongo_uri=None,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def password_handler(settings) -> PasswordHandler:
    return PasswordHandler(rounds=settings.password_hash_rounds)


@pytest.fixture
def jwt_handler(settings, clock) -> JWTHandler:
    return JWTHandler(settings, clock=clock)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def auth_service(user_repository, password_handler, jwt_handler, settings) -> AuthService:
    return AuthService(user_repository, password_handler, jwt_handler, settings)


@pytest.fixture
def app(settings, user_repository, clock):
    return create_app(settings, user_repository=user_repository, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def asgi_client(app):
    """httpx client bound to the app, with the lifespan running."""
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

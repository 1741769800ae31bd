import httpx
import pytest
import pytest_asyncio

from auth_service.client.session import AuthSession, SessionExpiredError


@pytest_asyncio.fixture
async def session(asgi_client):
    s = AuthSession("http://test", client=asgi_client)
    await s.register("a@example.com", "pw123", "Al")
    return s


@pytest.mark.asyncio
async def test_login_and_profile(asgi_client):
    session = AuthSession("http://test", client=asgi_client)
    await session.register("a@example.com", "pw123")
    session.logout()
    assert not session.is_authenticated

    result = await session.login("a@example.com", "pw123")
    profile = await session.get_profile()
    assert profile.user_id == result.user.user_id


@pytest.mark.asyncio
async def test_expired_access_token_is_refreshed_and_retried(session, clock):
    original = session.tokens
    clock.advance(minutes=15, seconds=1)

    profile = await session.get_profile()

    assert profile.email == "a@example.com"
    assert session.tokens.refresh_token != original.refresh_token


@pytest.mark.asyncio
async def test_expired_refresh_token_ends_session(session, clock):
    clock.advance(days=7, seconds=1)

    with pytest.raises(SessionExpiredError):
        await session.get_profile()
    assert session.tokens is None


@pytest.mark.asyncio
async def test_refresh_without_tokens_fails():
    async with AuthSession("http://test") as session:
        with pytest.raises(SessionExpiredError):
            await session.refresh()


@pytest.mark.asyncio
async def test_retry_happens_only_once(session):
    calls = {"profile": 0, "refresh": 0}
    pair = session.tokens.model_dump(mode="json")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/auth/refresh"):
            calls["refresh"] += 1
            return httpx.Response(200, json={"message": "Token refreshed", "tokens": pair})
        calls["profile"] += 1
        return httpx.Response(401, json={"detail": "Invalid or expired token"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as mock_client:
        flaky = AuthSession("http://test", client=mock_client)
        flaky.tokens = session.tokens
        with pytest.raises(SessionExpiredError):
            await flaky.get_profile()

    assert calls == {"profile": 2, "refresh": 1}
    assert flaky.tokens is None


@pytest.mark.asyncio
async def test_login_error_propagates(asgi_client):
    session = AuthSession("http://test", client=asgi_client)
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await session.login("nobody@example.com", "pw123")
    assert exc_info.value.response.status_code == 401
    assert not session.is_authenticated

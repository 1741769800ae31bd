"""Async client for the authentication API.

The session owns its tokens; nothing is kept in module or process globals.
A request that comes back 401 triggers one refresh-then-retry; a second
failure ends the session.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from auth_service.models.auth import AuthResponse, ProfileResponse, RefreshResponse, TokenPair

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class SessionExpiredError(Exception):
    """The held tokens can no longer be used; log in again."""


class AuthSession:
    """Holds a token pair and replays requests once after rotating it.

    Args:
        base_url: Backend URL, e.g. http://localhost:8000
        client: Existing httpx.AsyncClient to use (not closed by the session)
        timeout: Request timeout in seconds for an owned client
    """

    def __init__(self, base_url: str, *, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.prefix = base_url.rstrip("/") + API_PREFIX
        self.tokens: Optional[TokenPair] = None

    async def __aenter__(self) -> "AuthSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _url(self, path: str) -> str:
        return self.prefix + path

    @property
    def is_authenticated(self) -> bool:
        return self.tokens is not None

    # ------ Token acquisition ------

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResponse:
        payload: Dict[str, Any] = {"email": email, "password": password}
        if name is not None:
            payload["name"] = name
        response = await self.client.post(self._url("/auth/register"), json=payload)
        response.raise_for_status()
        result = AuthResponse.model_validate(response.json())
        self.tokens = result.tokens
        return result

    async def login(self, email: str, password: str) -> AuthResponse:
        response = await self.client.post(
            self._url("/auth/login"), json={"email": email, "password": password}
        )
        response.raise_for_status()
        result = AuthResponse.model_validate(response.json())
        self.tokens = result.tokens
        return result

    def logout(self) -> None:
        self.tokens = None

    async def refresh(self) -> TokenPair:
        """Rotate the held refresh token. Clears the session if rotation fails."""
        if self.tokens is None:
            raise SessionExpiredError("No refresh token available")

        response = await self.client.post(
            self._url("/auth/refresh"), json={"refresh_token": self.tokens.refresh_token}
        )
        if response.status_code != 200:
            logger.info(f"Token refresh failed with status {response.status_code}")
            self.tokens = None
            raise SessionExpiredError("Session expired, log in again")

        self.tokens = RefreshResponse.model_validate(response.json()).tokens
        return self.tokens

    # ------ Authenticated requests ------

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.tokens is not None:
            headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return await self.client.request(method, self._url(path), headers=headers, **kwargs)

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated request, refreshing and retrying once on 401."""
        response = await self._send(method, path, **kwargs)
        if response.status_code != 401 or self.tokens is None:
            return response

        logger.debug(f"{method} {path} returned 401; refreshing tokens and retrying once")
        await self.refresh()
        response = await self._send(method, path, **kwargs)
        if response.status_code == 401:
            self.tokens = None
            raise SessionExpiredError("Session expired, log in again")
        return response

    async def get_profile(self) -> ProfileResponse:
        response = await self.request("GET", "/auth/profile")
        response.raise_for_status()
        return ProfileResponse.model_validate(response.json())

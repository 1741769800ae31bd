"""
FastAPI dependencies for authentication.
Services live on app.state (built in lifespan), no module-level singletons.
"""

from typing import Optional

from fastapi import Depends, Request

from auth_service.models.auth import TokenClaims

from .exceptions import AuthenticationError
from .service import AuthService, INVALID_TOKEN


def get_auth_service(request: Request) -> AuthService:
    """Get instance from app.state initialized in lifespan."""
    return request.app.state.auth_service


def extract_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and isinstance(auth_header, str):
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
            return parts[1]
    return None


async def get_current_claims(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    token = extract_bearer_token(request)
    if not token:
        raise AuthenticationError(INVALID_TOKEN)
    return service.get_profile(token)

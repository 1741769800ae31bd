"""Authentication API endpoints."""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, status

from auth_service.auth.dependencies import get_auth_service, get_current_claims
from auth_service.auth.service import AuthService
from auth_service.models.auth import (
    AuthErrorResponse,
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RefreshResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenClaims,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="User registration",
    description="Create an account and return an initial token pair",
    responses={
        400: {"description": "Missing or invalid fields", "model": AuthErrorResponse},
        409: {"description": "Email already registered", "model": AuthErrorResponse},
        500: {"description": "Internal server error", "model": AuthErrorResponse},
    }
)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await service.register(
        register_data.email, register_data.password, register_data.name
    )
    return AuthResponse(
        message="User registered successfully", user=result.user, tokens=result.tokens
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user and return JWT tokens",
    responses={
        400: {"description": "Missing fields", "model": AuthErrorResponse},
        401: {"description": "Invalid credentials", "model": AuthErrorResponse},
        500: {"description": "Internal server error", "model": AuthErrorResponse},
    }
)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await service.login(login_data.email, login_data.password)
    return AuthResponse(message="Login successful", user=result.user, tokens=result.tokens)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user profile",
    description="Return the identity carried by a valid access token",
    responses={
        401: {"description": "Missing, invalid or expired token", "model": AuthErrorResponse},
    }
)
async def get_profile(claims: TokenClaims = Depends(get_current_claims)) -> ProfileResponse:
    return ProfileResponse(user_id=claims.user_id, email=claims.email)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    status_code=status.HTTP_200_OK,
    summary="Rotate tokens",
    description="Exchange a refresh token for a new token pair",
    responses={
        400: {"description": "Missing refresh token", "model": AuthErrorResponse},
        401: {"description": "Invalid or expired refresh token", "model": AuthErrorResponse},
    }
)
async def refresh_tokens(
    refresh_data: RefreshTokenRequest,
    service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    tokens = service.refresh(refresh_data.refresh_token)
    return RefreshResponse(tokens=tokens)


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Authentication service health check",
    include_in_schema=False  # Don't include in OpenAPI docs
)
async def auth_health_check() -> Dict[str, str]:
    """Authentication service health check."""
    return {"status": "healthy", "service": "authentication"}

from .user import (
    UserRecord as UserRecord,
    UserPublic as UserPublic,
    normalize_email as normalize_email,
)
from .auth import (
    TokenClass as TokenClass,
    TokenClaims as TokenClaims,
    TokenPair as TokenPair,
    AuthResult as AuthResult,
    RegisterRequest as RegisterRequest,
    LoginRequest as LoginRequest,
    RefreshTokenRequest as RefreshTokenRequest,
    AuthResponse as AuthResponse,
    RefreshResponse as RefreshResponse,
    ProfileResponse as ProfileResponse,
    AuthErrorResponse as AuthErrorResponse,
)

"""
JWT issuance, validation and refresh rotation.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Union
from uuid import uuid4

from jose import jwt, JWTError as JoseJWTError

from auth_service.config import Settings
from auth_service.models.auth import TokenClaims, TokenClass, TokenPair

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ----- Custom Exceptions -----

class JWTError(Exception):
    pass


class InvalidTokenError(JWTError):
    pass


# ----- Main Handler -----

class JWTHandler:
    """Signs and checks access/refresh tokens with one symmetric key.

    Holds no mutable state: the key and TTLs are read from settings once,
    and time comes from ``clock`` so expiry can be driven in tests.
    """

    def __init__(self, settings: Settings, clock: Optional[Clock] = None):
        self.settings = settings
        self.clock = clock or utc_now

        if not self.settings.jwt_secret or not self.settings.jwt_secret.get_secret_value():
            raise ValueError("JWT_SECRET must be set")

        self.access_ttl = timedelta(seconds=self.settings.access_token_ttl_seconds)
        self.refresh_ttl = timedelta(seconds=self.settings.refresh_token_ttl_seconds)

    @property
    def secret(self) -> str:
        return self.settings.jwt_secret.get_secret_value()

    @property
    def algorithm(self) -> str:
        return self.settings.jwt_algorithm

    def _now(self) -> datetime:
        # JWT timestamps have second resolution
        return self.clock().astimezone(timezone.utc).replace(microsecond=0)

    # ------ Token Creation ------

    def _encode(self, user_id: str, email: str, token_class: TokenClass,
                issued_at: datetime, ttl: timedelta) -> str:
        payload: Dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "type": token_class.value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue(self, user_id: str, email: str) -> TokenPair:
        """Issue an access/refresh pair sharing one issuance timestamp."""
        issued_at = self._now()
        return TokenPair(
            access_token=self._encode(user_id, email, TokenClass.ACCESS, issued_at, self.access_ttl),
            refresh_token=self._encode(user_id, email, TokenClass.REFRESH, issued_at, self.refresh_ttl),
            issued_at=issued_at,
            expires_in=self.settings.access_token_ttl_seconds,
            refresh_expires_in=self.settings.refresh_token_ttl_seconds,
        )

    # ------ Token Verification ------

    def decode(self, token: str) -> TokenClaims:
        """Verify the signature and parse the claims. Expiry is not checked here."""
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") != self.algorithm:
                raise InvalidTokenError("Invalid algorithm")

            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
            return TokenClaims(
                user_id=payload["sub"],
                email=payload["email"],
                token_class=TokenClass(payload["type"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_id=payload["jti"],
            )

        except InvalidTokenError:
            raise
        except JoseJWTError as e:
            raise InvalidTokenError("Invalid token") from e
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise InvalidTokenError(f"Malformed claims: {type(e).__name__}") from e

    def validate(self, token: str, expected_class: Union[TokenClass, str]) -> Optional[TokenClaims]:
        """Return the claims of a usable token of ``expected_class``, else None.

        Checks run in order: signature, expiry, token class. The reason for a
        rejection is only logged at DEBUG level.
        """
        if not token or not isinstance(token, str):
            return None

        try:
            claims = self.decode(token)
        except InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            return None

        if self._now() >= claims.expires_at:
            logger.debug("Token rejected: expired")
            return None

        if claims.token_class != TokenClass(expected_class):
            logger.debug("Token rejected: wrong token type")
            return None

        return claims

    def rotate(self, refresh_token: str) -> Optional[TokenPair]:
        """Exchange a valid refresh token for a brand-new pair.

        The presented refresh token is not revoked and stays usable until
        its own expiry.
        """
        claims = self.validate(refresh_token, TokenClass.REFRESH)
        if claims is None:
            return None
        return self.issue(claims.user_id, claims.email)

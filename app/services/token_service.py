"""Identity token issuance/verification and the session cookie policy."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from fastapi import Response

from app.models.auth import CookieDescriptor, TokenClaims
from app.models.config import AuthSettings

logger = logging.getLogger("wellness")


class InvalidTokenError(Exception):
    """Token failed verification (bad signature, tampered, malformed or expired)."""


class TokenService:
    """Signs and verifies HS256 JWTs carrying the user id."""

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        expiry: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize token service.

        Args:
            secret: Server-held signing secret
            algorithm: JWT signing algorithm
            expiry: Lifetime of issued tokens
            clock: Source of the issue time

        Raises:
            RuntimeError: If no signing secret is configured
        """
        if not secret:
            raise RuntimeError("JWT_SECRET is not defined in environment variables")
        self._secret = secret
        self.algorithm = algorithm
        self.expiry = expiry
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expiry=timedelta(days=settings.token_expiry_days),
        )

    def issue(self, user_id: str) -> str:
        """Issue a new token for ``user_id`` with a fresh expiry window."""
        now = self._clock()
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + self.expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry of a token.

        Raises:
            InvalidTokenError: For any verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "id"]},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidTokenError(str(e)) from e

        user_id = payload["id"]
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Token subject is missing")

        return TokenClaims(
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


class CookiePolicy:
    """Fixed attribute set of the session cookie."""

    def __init__(self, name: str = "auth_token", secure: bool = False, max_age: int = 7 * 24 * 60 * 60):
        self.name = name
        self.secure = secure
        self.max_age = max_age

    def build(self, token: str) -> CookieDescriptor:
        """Describe the cookie carrying ``token``; only the value varies."""
        return CookieDescriptor(name=self.name, value=token, secure=self.secure, max_age=self.max_age)

    def expired(self) -> CookieDescriptor:
        """Describe an empty cookie that expires immediately (logout)."""
        return CookieDescriptor(name=self.name, value="", secure=self.secure, max_age=0)

    @staticmethod
    def write(response: Response, descriptor: CookieDescriptor) -> None:
        """Add a Set-Cookie header for ``descriptor`` to ``response``."""
        response.set_cookie(
            key=descriptor.name,
            value=descriptor.value,
            max_age=descriptor.max_age,
            path=descriptor.path,
            secure=descriptor.secure,
            httponly=descriptor.httponly,
            samesite=descriptor.samesite,
        )

"""Authentication service."""

import logging

import bcrypt
from fastapi import Request

from app.models.auth import AuthResult, Denial, Identity
from app.services.token_service import InvalidTokenError, TokenService

logger = logging.getLogger("wellness")


class AuthService:
    """Password hashing and request authentication."""

    def __init__(self, token_service: TokenService, cookie_name: str = "auth_token", bcrypt_rounds: int = 10):
        """
        Initialize auth service.

        Args:
            token_service: Service used to verify session tokens
            cookie_name: Name of the session cookie
            bcrypt_rounds: bcrypt cost factor for new hashes
        """
        self.token_service = token_service
        self.cookie_name = cookie_name
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Verify a password against a stored hash."""
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False

    def authenticate(self, request: Request) -> AuthResult:
        """
        Resolve a request to the user identity carried by its session cookie.

        Returns:
            Identity on success; a 401 denial for a missing or invalid token,
            a 500 denial for anything unexpected
        """
        try:
            token = request.cookies.get(self.cookie_name)
            if not token:
                return Denial(status_code=401, error="Authentication required")

            try:
                claims = self.token_service.verify(token)
            except InvalidTokenError:
                logger.info("Rejected request with invalid session token")
                return Denial(status_code=401, error="Invalid authentication")

            return Identity(user_id=claims.user_id)
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            return Denial(status_code=500, error="Authentication failed")

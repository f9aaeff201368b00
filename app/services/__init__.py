"""Service layer for business logic."""

from .auth_service import AuthService
from .encryption_service import EncryptionService
from .rate_limiter import RateLimiter
from .token_service import CookiePolicy, TokenService
from .user_service import UserService
from .user_store import UserStore
from .yaml_service import YAMLService

__all__ = [
    "YAMLService",
    "TokenService",
    "CookiePolicy",
    "RateLimiter",
    "AuthService",
    "EncryptionService",
    "UserStore",
    "UserService",
]

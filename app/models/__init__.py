"""Data models for the Wellness Journey API."""

from .config import AppConfig
from .auth import AuthResult, CookieDescriptor, Denial, Identity, TokenClaims
from .user import Condition, Profile, SavedItem, User

__all__ = [
    "AppConfig",
    "AuthResult",
    "CookieDescriptor",
    "Denial",
    "Identity",
    "TokenClaims",
    "Condition",
    "Profile",
    "SavedItem",
    "User",
]

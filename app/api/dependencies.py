"""Configuration loading and access to the services held by the application."""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from fastapi import Request

from app.models.auth import AuthResult
from app.models.config import AppConfig
from app.services.auth_service import AuthService
from app.services.token_service import CookiePolicy, TokenService
from app.services.user_service import UserService
from app.services.yaml_service import YAMLService

logger = logging.getLogger("wellness")


def get_config(config_path: Path = Path("config.yaml"), environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Get application configuration.

    Values from ``config.yaml`` are overridden by the ``APP_ENV``,
    ``JWT_SECRET`` and ``ENCRYPTION_KEY`` environment variables.

    Returns:
        Application configuration
    """
    if not config_path.exists():
        raise RuntimeError("config.yaml not found")

    config_data = YAMLService.load_yaml(config_path)
    return apply_environment(AppConfig(**config_data), os.environ if environ is None else environ)


def apply_environment(config: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Overlay environment variables onto ``config``."""
    if environ.get("APP_ENV"):
        config.app.environment = environ["APP_ENV"]
    if environ.get("JWT_SECRET"):
        config.auth.jwt_secret = environ["JWT_SECRET"]
    if environ.get("ENCRYPTION_KEY"):
        config.encryption.key = environ["ENCRYPTION_KEY"]
    return config


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_cookie_policy(request: Request) -> CookiePolicy:
    return request.app.state.cookie_policy


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def authenticate(request: Request) -> AuthResult:
    """Resolve the request's session cookie to an identity or a denial."""
    return get_auth_service(request).authenticate(request)

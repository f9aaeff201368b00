"""FastAPI application factory."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI

from app.api.cors import CORSPolicy
from app.api.middleware import ApiMiddleware
from app.api.routes import auth, user
from app.models.config import AppConfig
from app.services.auth_service import AuthService
from app.services.encryption_service import EncryptionService
from app.services.rate_limiter import RateLimiter
from app.services.token_service import CookiePolicy, TokenService
from app.services.user_service import UserService
from app.services.user_store import UserStore

logger = logging.getLogger("wellness")

LIMITER_NAMES = ("auth", "password", "api")


def create_app(config: AppConfig, clock: Optional[Callable[[], float]] = None) -> FastAPI:
    """
    Build the application and its service graph.

    Args:
        config: Application configuration
        clock: Optional wall clock (seconds) for the rate limiters

    Raises:
        RuntimeError: If the JWT signing secret is missing
    """
    production = config.app.is_production

    # Refuses to build without a signing secret
    token_service = TokenService.from_settings(config.auth)
    cookie_policy = CookiePolicy(
        name=config.auth.cookie_name,
        secure=production,
        max_age=int(timedelta(days=config.auth.token_expiry_days).total_seconds()),
    )
    auth_service = AuthService(
        token_service,
        cookie_name=config.auth.cookie_name,
        bcrypt_rounds=config.auth.bcrypt_rounds,
    )
    encryption = EncryptionService(config.encryption.key, production=production)
    store = UserStore(Path(config.paths.data), encryption)
    user_service = UserService(store, auth_service)

    limiters = {
        name: RateLimiter.from_settings(config.rate_limit(name), clock=clock or time.time) for name in LIMITER_NAMES
    }
    api = ApiMiddleware(CORSPolicy.from_settings(config.cors, production), production=production)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan event handler."""
        logger.info(f"Starting {config.app.title} v{config.app.version} ({config.app.environment})")
        logger.info(f"Data directory: {config.paths.data}")
        yield
        logger.info(f"Shutting down {config.app.title}")

    app = FastAPI(
        title=config.app.title,
        version=config.app.version,
        debug=config.app.debug,
        description="""
    **Wellness Journey API** - accounts, health profiles and bookmarks.

    Authentication uses an HTTP-only `auth_token` cookie holding a signed JWT
    that is valid for 7 days.

    ## Documentation
    - **Swagger UI**: `/docs`
    - **ReDoc**: `/redoc`
    """,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.token_service = token_service
    app.state.cookie_policy = cookie_policy
    app.state.auth_service = auth_service
    app.state.user_service = user_service
    app.state.rate_limiters = limiters

    app.include_router(auth.create_router(api, limiters))
    app.include_router(user.create_router(api, limiters))

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": config.app.version}

    return app

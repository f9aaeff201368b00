"""Application configuration models."""

from typing import Optional

from pydantic import BaseModel, Field


class AppSettings(BaseModel):
    """Application settings."""

    title: str = "Wellness Journey API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


class PathSettings(BaseModel):
    """Path settings."""

    data: str = "./data"
    logs: str = "./logs"


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = "./logs/wellness.log"


class AuthSettings(BaseModel):
    """Authentication settings."""

    jwt_secret: Optional[str] = None  # normally provided via JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_expiry_days: int = 7
    cookie_name: str = "auth_token"
    bcrypt_rounds: int = 10


class CORSSettings(BaseModel):
    """Cross-origin settings."""

    production_origins: list[str] = Field(default_factory=lambda: ["https://your-domain.com"])
    development_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    allowed_methods: list[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    allowed_headers: list[str] = Field(default_factory=lambda: ["Content-Type", "Authorization"])
    allow_credentials: bool = True
    max_age: int = 86400  # 24 hours


class RateLimitSettings(BaseModel):
    """Settings for a single rate limiter."""

    window_seconds: int = Field(900, ge=1)
    max_requests: int = Field(100, ge=1)
    message: str = "Too many requests, please try again later"


def _default_rate_limits() -> dict[str, RateLimitSettings]:
    return {
        "auth": RateLimitSettings(
            window_seconds=15 * 60,
            max_requests=10,
            message="Too many authentication attempts, please try again later",
        ),
        "password": RateLimitSettings(
            window_seconds=60 * 60,
            max_requests=5,
            message="Too many password change attempts, please try again later",
        ),
        "api": RateLimitSettings(
            window_seconds=60,
            max_requests=60,
            message="Too many requests, please try again later",
        ),
    }


class EncryptionSettings(BaseModel):
    """Profile field encryption settings."""

    key: Optional[str] = None  # normally provided via ENCRYPTION_KEY


class AppConfig(BaseModel):
    """Main application configuration."""

    app: AppSettings = Field(default_factory=AppSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    rate_limits: dict[str, RateLimitSettings] = Field(default_factory=_default_rate_limits)
    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)

    def rate_limit(self, name: str) -> RateLimitSettings:
        """Return limiter settings by name, falling back to the defaults."""
        if name in self.rate_limits:
            return self.rate_limits[name]
        return _default_rate_limits().get(name, RateLimitSettings())

"""Authentication data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.validators import validate_email, validate_password_strength


class RequestModel(BaseModel):
    """Base for JSON request bodies (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def label(cls, name: str) -> str:
        """Human-readable label of a field, looked up by name or alias."""
        for field_name, info in cls.model_fields.items():
            if name in (field_name, info.alias):
                return info.title or field_name
        return name


def require_value(value: Optional[str], label: str) -> str:
    """Reject empty strings with the same message as a missing field."""
    if value is None or value == "":
        raise ValueError(f"{label} is required")
    return value


class LoginRequest(RequestModel):
    """Login request model."""

    email: str = Field(..., title="Email")
    password: str = Field(..., title="Password")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        require_value(v, "Email")
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return require_value(v, "Password")


class ChangePasswordRequest(RequestModel):
    """Change password request model."""

    current_password: str = Field(..., alias="currentPassword", title="Current password")
    new_password: str = Field(..., alias="newPassword", title="New password")

    @field_validator("current_password")
    @classmethod
    def check_current(cls, v: str) -> str:
        return require_value(v, "Current password")

    @field_validator("new_password")
    @classmethod
    def check_new(cls, v: str) -> str:
        require_value(v, "New password")
        if len(v) < 8:
            raise ValueError("Must be at least 8 characters")
        return validate_password_strength(v)


class ChangeEmailRequest(RequestModel):
    """Change email request model."""

    current_email: str = Field(..., alias="currentEmail", title="Current email")
    new_email: str = Field(..., alias="newEmail", title="New email")

    @field_validator("current_email", "new_email")
    @classmethod
    def check_emails(cls, v: str, info) -> str:
        require_value(v, cls.label(info.field_name))
        return validate_email(v)


class TokenClaims(BaseModel):
    """Verified identity token payload."""

    user_id: str
    issued_at: datetime
    expires_at: datetime


class CookieDescriptor(BaseModel):
    """Wire representation of the session cookie."""

    name: str
    value: str
    httponly: Literal[True] = True
    secure: bool
    samesite: Literal["strict"] = "strict"
    max_age: int
    path: str = "/"


@dataclass(frozen=True)
class Identity:
    """Successful authorization: the request belongs to ``user_id``."""

    user_id: str


@dataclass(frozen=True)
class Denial:
    """An expected negative outcome, returned to the client as JSON."""

    status_code: int
    error: Optional[str] = None
    errors: Optional[dict[str, list[str]]] = None
    headers: dict[str, str] = field(default_factory=dict)

    def body(self) -> dict:
        if self.errors is not None:
            return {"errors": self.errors}
        return {"error": self.error}


AuthResult = Union[Identity, Denial]

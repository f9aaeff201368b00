"""User and profile data models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.auth import RequestModel, require_value
from app.utils.validators import (
    sanitize_input,
    validate_date_of_birth,
    validate_email,
    validate_gender,
    validate_name,
    validate_password_strength,
)


class CamelModel(BaseModel):
    """Model serialized with camelCase keys in API responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(BaseModel):
    """Stored user record (credentials only)."""

    id: str
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Condition(CamelModel):
    """A health condition attached to a profile."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class SavedItem(CamelModel):
    """A bookmarked tip or resource."""

    id: str
    saved_at: datetime = Field(default_factory=datetime.now)


class Profile(CamelModel):
    """Health profile; first/last name, date of birth, gender and condition names are encrypted at rest."""

    user_id: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    conditions: list[Condition] = Field(default_factory=list)
    saved_resources: list[SavedItem] = Field(default_factory=list)
    saved_tips: list[SavedItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class UserSummary(CamelModel):
    """Public user fields; never includes the password hash."""

    id: str
    email: str
    created_at: datetime


class RegisterRequest(RequestModel):
    """Registration request model."""

    first_name: str = Field(..., alias="firstName", title="First name")
    last_name: str = Field(..., alias="lastName", title="Last name")
    email: str = Field(..., title="Email")
    password: str = Field(..., title="Password")

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, v: str, info) -> str:
        label = cls.label(info.field_name)
        require_value(v, label)
        return sanitize_input(validate_name(v, label))

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        require_value(v, "Email")
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        require_value(v, "Password")
        return validate_password_strength(v)


class ProfileUpdateRequest(RequestModel):
    """
    Partial profile update.

    Every field is optional and validators only run for fields present in the
    request body, so the rule set applied is determined by which keys were sent.
    """

    first_name: Optional[str] = Field(None, alias="firstName", title="First name")
    last_name: Optional[str] = Field(None, alias="lastName", title="Last name")
    date_of_birth: Optional[date] = Field(None, alias="dateOfBirth", title="Date of birth")
    gender: Optional[str] = Field(None, title="Gender")
    conditions: Optional[list[Condition]] = Field(None, title="Conditions")

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, v: Optional[str], info) -> Optional[str]:
        if v is None:
            return v
        return sanitize_input(validate_name(v, cls.label(info.field_name)))

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def empty_date(cls, v):
        # An empty string clears the date; only ISO strings are parsed
        if v is None or v == "":
            return None
        if not isinstance(v, str):
            raise ValueError("Invalid date format")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def check_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        return validate_date_of_birth(v)

    @field_validator("gender")
    @classmethod
    def check_gender(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_gender(v)

    @field_validator("conditions")
    @classmethod
    def sanitize_conditions(cls, v: Optional[list[Condition]]) -> Optional[list[Condition]]:
        if v is None:
            return v
        return [Condition(id=c.id, name=sanitize_input(c.name)) for c in v]


class DeleteAccountRequest(RequestModel):
    """Account deletion requires the current password."""

    password: str = Field(..., title="Password")

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return require_value(v, "Password")

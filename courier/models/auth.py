"""Auth request and response models with validation."""

import re

from pydantic import BaseModel, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


class Identity(BaseModel):
    """The verified username a caller is acting as."""

    username: str


class LoginRequest(BaseModel):
    """Login credentials for authentication.

    Attributes:
        username: User's unique identifier
        password: User's password
    """

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """New account registration.

    Attributes:
        username: Unique identifier (1-100 chars, alphanumeric + underscore/hyphen)
        password: Password (non-empty, not whitespace only)
        first_name: Given name
        last_name: Family name
        phone: Contact phone number
    """

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator("username")
    @classmethod
    def username_valid_chars(cls, v: str) -> str:
        """Ensure username contains only alphanumeric, underscore, or hyphen."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must contain only alphanumeric characters, "
                "underscores, or hyphens"
            )
        return v

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Ensure password is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Password cannot be empty or whitespace only")
        return v


class TokenResponse(BaseModel):
    """Signed identity token returned by register and login."""

    token: str

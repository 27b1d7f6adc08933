"""
Pydantic models for request / response validation.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from issuer.auth_utils import MAX_PASSWORD_BYTES, password_too_long


# ---- Credentials ----

class LoginRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=1,
        max_length=150,
        validation_alias=AliasChoices("username", "identifier"),
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        validation_alias=AliasChoices("password", "secret"),
    )


class RegisterRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=1,
        max_length=150,
        validation_alias=AliasChoices("username", "identifier"),
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        validation_alias=AliasChoices("password", "secret"),
    )
    display_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class TokenResponse(BaseModel):
    token: str


# ---- Identity ----

class UserResponse(BaseModel):
    id: str
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[str] = None


class MeResponse(BaseModel):
    user: UserResponse


# ---- Errors ----

class ErrorResponse(BaseModel):
    message: str


# ---- Health ----

class HealthResponse(BaseModel):
    status: str
    database: bool

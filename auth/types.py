"""Pydantic models for auth domain."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    """A registered user as stored, credentials included."""

    id: UUID
    username: str
    email: str
    password_hash: str = Field(..., repr=False)
    salt: str = Field(..., repr=False)
    refresh_token: str | None = Field(default=None, repr=False)
    birth_date: date | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class NewUser(BaseModel):
    """User record handed to the store for creation."""

    username: str
    email: str
    password_hash: str = Field(..., repr=False)
    salt: str = Field(..., repr=False)
    birth_date: date | None = None


class TokenPair(BaseModel):
    """Access/refresh token bundle returned by every successful auth call."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")


class AccessTokenClaims(BaseModel):
    """Verified claims carried by an access token."""

    id: UUID
    username: str
    issued_at: datetime
    expires_at: datetime


class RegisterRequest(BaseModel):
    """Request payload for registration."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)
    birth_date: date | None = Field(default=None, alias="birthDate")


class LoginRequest(BaseModel):
    """Request payload for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)


class RefreshRequest(BaseModel):
    """Request payload for token refresh."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., min_length=1, alias="refreshToken")

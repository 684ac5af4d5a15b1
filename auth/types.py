"""Pydantic models for auth domain."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Account(BaseModel):
    """A platform user as stored. Carries the pending code, so never serialize it out."""

    id: UUID
    email: str
    name: str | None = None
    country: str | None = None
    verification_code: str | None = None
    verification_code_expires: datetime | None = None
    email_verified: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    def profile(self) -> "AccountProfile":
        return AccountProfile(
            id=self.id,
            email=self.email,
            name=self.name,
            country=self.country,
            email_verified=self.email_verified,
        )


class AccountProfile(BaseModel):
    """Public view of an account returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    email: str
    name: str | None = None
    country: str | None = None
    email_verified: bool = Field(False, serialization_alias="emailVerified")


class SessionClaims(BaseModel):
    """Decoded contents of a verified session token."""

    user_id: UUID
    email: str
    issued_at: datetime
    expires_at: datetime


class IssuedSession(BaseModel):
    """A freshly signed session token and what it asserts."""

    token: str
    claims: SessionClaims


class RequestCodeRequest(BaseModel):
    """Signup when both name and country are given, login otherwise."""

    email: EmailStr
    name: str | None = Field(None, min_length=1, max_length=255)
    country: str | None = Field(None, min_length=1, max_length=100)

    @property
    def is_signup(self) -> bool:
        return bool(self.name and self.country)


class VerifyCodeRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class RequestCodeResult(BaseModel):
    success: bool
    message: str


class VerifyCodeResult(BaseModel):
    """Successful verification: the token (for client-side storage) and the profile."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    session_token: str = Field(..., serialization_alias="sessionToken")
    user: AccountProfile

    @field_validator("session_token")
    @classmethod
    def token_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("session_token must not be empty")
        return value

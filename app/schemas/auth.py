"""Request/response schemas for auth endpoints, and the decoded token claims."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.user import Role


class RegisterRequest(BaseModel):
    """New account: username, password, email. Formats are checked by the account service."""

    username: str = Field(..., description="3-20 letters, digits or underscores")
    password: str = Field(..., description="8-64 characters")
    email: str = Field(..., description="Email address")


class RegisterResponse(BaseModel):
    """Returned after successful registration; token is already a live session."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(default="User registered successfully.")
    user_id: int = Field(..., alias="userId")
    token: str = Field(..., description="Bearer token")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Bearer token returned after successful login."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    token: str = Field(..., description="Bearer token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., alias="expiresAt")


class TokenClaims(BaseModel):
    """
    Decoded, validated token payload. Every field is required; a token missing
    one, or carrying one of the wrong type, is rejected as invalid.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: int = Field(..., validation_alias="sub", gt=0)
    role: Role
    issued_at: datetime = Field(..., validation_alias="iat")
    expires_at: datetime = Field(..., validation_alias="exp")
    token_id: str = Field(..., validation_alias="jti", min_length=1)


class Principal(BaseModel):
    """Authenticated caller resolved by the auth gate."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    role: Role
    token: str = Field(..., repr=False)


class UserListItem(BaseModel):
    """User entry for admin list (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role

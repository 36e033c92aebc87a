"""Pydantic request/response schemas."""

from app.schemas.auth import (
    LoginRequest,
    Principal,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    TokenResponse,
    UserListItem,
)
from app.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "Principal",
    "RegisterRequest",
    "RegisterResponse",
    "TokenClaims",
    "TokenResponse",
    "UserListItem",
]

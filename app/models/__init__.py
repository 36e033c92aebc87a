"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.session_token import SessionToken
from app.models.user import Role, User

__all__ = ["Base", "Role", "SessionToken", "User"]

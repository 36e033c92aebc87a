"""ORM model for exchange accounts (auth and RBAC)."""

import enum

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class Role(str, enum.Enum):
    """Account roles, ordered from least to most privileged."""

    USER = "USER"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def satisfies(self, required: "Role") -> bool:
        """True when this role meets or exceeds ``required``."""
        return self.rank >= required.rank


_ROLE_RANK = {Role.USER: 0, Role.ADMIN: 1}


class User(Base):
    """
    User account for token authentication and role-based access control.

    role: 'USER' or 'ADMIN'. password_hash is an Argon2id encoded string that
    may be rotated; id never changes.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    session_tokens = relationship(
        "SessionToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

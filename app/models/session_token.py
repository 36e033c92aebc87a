"""ORM model for live session tokens: the revocation ledger."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class SessionToken(Base):
    """
    One issued bearer token. A token authorizes only while its row exists and
    expires_at is in the future; deleting the row revokes it.
    """

    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = Column(String(1024), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="session_tokens")

    __table_args__ = (
        Index("ix_session_tokens_token_user", "token", "user_id"),
    )

    def __repr__(self) -> str:
        return f"SessionToken(id={self.id!r}, user_id={self.user_id!r}, expires_at={self.expires_at!r})"

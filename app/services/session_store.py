"""Relational ledger of live session tokens.

A token authorizes only while its row exists here and has not expired. Rows are
deleted to revoke. All timestamps are timezone-aware UTC.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models import SessionToken, User

logger = logging.getLogger(__name__)


def _utc(value: datetime | None) -> datetime:
    if value is None:
        return datetime.now(UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SessionStore:
    """
    Persist issued tokens and answer "is this token still live?".

    With single_session=True (the default policy) put() revokes every prior
    token of the user, so at most one live row exists per user. With
    single_session=False only the user's expired rows are dropped.
    """

    def __init__(self, db: Session, single_session: bool = True) -> None:
        self._db = db
        self._single_session = single_session

    def put(
        self,
        user_id: int,
        token: str,
        expires_at: datetime,
        now: datetime | None = None,
    ) -> SessionToken:
        """
        Revoke the user's prior tokens and insert the new one in one transaction.

        The owning user row is locked first (SELECT ... FOR UPDATE) so
        concurrent puts for the same user run one after the other and the later
        one wins. Changes already pending on the session commit together with
        the token. On failure everything is rolled back and StorageError is raised.
        """
        now = _utc(now)
        try:
            owner = self._db.execute(
                select(User.id).where(User.id == user_id).with_for_update()
            ).scalar_one_or_none()
            if owner is None:
                self._db.rollback()
                logger.error("Session put for unknown user_id=%s", user_id)
                raise StorageError()
            prior = self._db.query(SessionToken).filter(SessionToken.user_id == user_id)
            if not self._single_session:
                prior = prior.filter(SessionToken.expires_at <= now)
            revoked = prior.delete(synchronize_session=False)
            row = SessionToken(user_id=user_id, token=token, expires_at=_utc(expires_at))
            self._db.add(row)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Session put failed for user_id=%s; rolled back", user_id)
            raise StorageError() from e
        logger.info(
            "Session stored",
            extra={"user_id": user_id, "revoked_count": revoked, "single_session": self._single_session},
        )
        return row

    def is_live(self, token: str, user_id: int, now: datetime | None = None) -> bool:
        """True only if a row matches (token, user_id) and expires strictly after now."""
        now = _utc(now)
        try:
            row = (
                self._db.query(SessionToken.id)
                .filter(
                    SessionToken.token == token,
                    SessionToken.user_id == user_id,
                    SessionToken.expires_at > now,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Session lookup failed for user_id=%s", user_id)
            raise StorageError() from e
        return row is not None

    def revoke_all(self, user_id: int) -> int:
        """Delete every token of the user (logout everywhere, password rotation). Returns count."""
        return self._delete(
            self._db.query(SessionToken).filter(SessionToken.user_id == user_id),
            "revoke_all",
            user_id=user_id,
        )

    def revoke(self, token: str) -> int:
        """Delete a single token (logout of one device). Returns count."""
        return self._delete(
            self._db.query(SessionToken).filter(SessionToken.token == token),
            "revoke",
        )

    def purge_expired(self, now: datetime | None = None) -> int:
        """Housekeeping: delete rows whose expiry has passed. Idempotent."""
        cutoff = _utc(now)
        return self._delete(
            self._db.query(SessionToken).filter(SessionToken.expires_at <= cutoff),
            "purge_expired",
        )

    def _delete(self, query, operation: str, user_id: int | None = None) -> int:
        try:
            deleted = query.delete(synchronize_session=False)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Session %s failed; rolled back", operation)
            raise StorageError() from e
        if deleted:
            logger.info(
                "Sessions deleted",
                extra={"operation": operation, "user_id": user_id, "deleted_count": deleted},
            )
        return deleted

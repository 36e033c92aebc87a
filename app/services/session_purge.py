"""Session housekeeping: delete session tokens whose expiry has passed."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.services.session_store import SessionStore

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_session_purge(session: Session, settings: "Settings", now: datetime | None = None) -> int:
    """
    Delete expired session rows and return how many were removed.

    Not needed for correctness (expiry is checked on every lookup); keeps the
    table small. Idempotent: safe to run repeatedly.
    """
    if not settings.SESSION_PURGE_ENABLED:
        logger.info("Session purge is disabled (SESSION_PURGE_ENABLED=false); skipping.")
        return 0

    cutoff = now or datetime.now(UTC)
    deleted_count = SessionStore(session).purge_expired(cutoff)

    if deleted_count > 0:
        logger.info(
            "Session purge run: cutoff=%s, sessions_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count

"""
CLI entrypoint for the expired-session purge job. Run from cron, e.g.:

  python -m app.purge_sessions

Or hourly: 0 * * * * cd /path/to/optionsdex-auth && .venv/bin/python -m app.purge_sessions
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.session_purge import run_session_purge

logger = logging.getLogger(__name__)


def main() -> int:
    """Run the purge: delete session tokens whose expires_at has passed."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        sessions_deleted = run_session_purge(db, settings)
        logger.info("Session purge completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except Exception as e:
        logger.exception("Session purge job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

"""Authorize inbound requests: bearer header, token signature/expiry, live session, role."""

import logging

from app.core.errors import Forbidden, TokenExpiredError, TokenInvalidError, Unauthorized
from app.core.tokens import TokenVerifier
from app.models.user import Role
from app.schemas.auth import Principal
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

MISSING_TOKEN = "Unauthorized: missing token"
INVALID_TOKEN = "Unauthorized: invalid or expired token"
INSUFFICIENT_ROLE = "Forbidden: insufficient role"


def parse_bearer(raw_header: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None if the header has another shape."""
    if not raw_header:
        return None
    parts = raw_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class AuthGate:
    """
    Two-layer check: the token must verify (signature, expiry, claims) AND
    still be the live record in the session store. A correctly signed token
    that a newer login superseded does not authorize.

    Rejections never say which check failed; the log does.
    """

    def __init__(self, verifier: TokenVerifier, store: SessionStore) -> None:
        self._verifier = verifier
        self._store = store

    def authorize(self, raw_header: str | None, required_role: Role | None = None) -> Principal:
        token = parse_bearer(raw_header)
        if token is None:
            raise Unauthorized(MISSING_TOKEN)

        try:
            claims = self._verifier.verify(token)
        except TokenExpiredError:
            raise Unauthorized(INVALID_TOKEN) from None
        except TokenInvalidError:
            raise Unauthorized(INVALID_TOKEN) from None

        if not self._store.is_live(token, claims.user_id):
            logger.info("Rejected token with no live session", extra={"user_id": claims.user_id})
            raise Unauthorized(INVALID_TOKEN)

        if required_role is not None and not claims.role.satisfies(required_role):
            logger.info(
                "Rejected request for insufficient role",
                extra={"user_id": claims.user_id, "role": claims.role.value, "required_role": required_role.value},
            )
            raise Forbidden(INSUFFICIENT_ROLE)

        return Principal(user_id=claims.user_id, role=claims.role, token=token)

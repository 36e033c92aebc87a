"""Signed session tokens: issuing (TokenIssuer) and verification (TokenVerifier).

Tokens are HMAC-signed JWTs carrying sub (user id), role, iat, exp and a random
jti. Both classes are stateless; revocation lives in the session store.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import jwt
from pydantic import ValidationError

from app.core.config import TokenConfig
from app.core.errors import InternalError, TokenExpiredError, TokenInvalidError
from app.models.user import Role
from app.schemas.auth import TokenClaims

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "role", "iat", "exp", "jti")


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token and the absolute time it stops being valid."""

    token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"IssuedToken(expires_at={self.expires_at.isoformat()})"


class TokenIssuer:
    """Mint signed tokens binding a user id and role for a fixed lifetime."""

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    def issue(self, user_id: int, role: Role | str, now: datetime | None = None) -> IssuedToken:
        # JWT timestamps are whole seconds; truncate so expires_at matches the exp claim.
        issued_at = (now or datetime.now(UTC)).astimezone(UTC).replace(microsecond=0)
        expires_at = issued_at + self._config.lifetime
        try:
            payload: dict[str, Any] = {
                "sub": str(user_id),
                "role": Role(role).value,
                "iat": issued_at,
                "exp": expires_at,
                "jti": secrets.token_urlsafe(16),
            }
            token = jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.exception("Token signing failed for user_id=%s", user_id)
            raise InternalError() from e
        return IssuedToken(token=token, expires_at=expires_at)


class TokenVerifier:
    """
    Check a token's signature and expiry and decode its claims.

    Raises TokenExpiredError when the signature is good but exp has passed,
    TokenInvalidError for everything else. Pure: no I/O.
    """

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                leeway=self._config.leeway,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired token")
            raise TokenExpiredError("Token has expired.") from e
        except jwt.PyJWTError as e:
            logger.warning("Rejected invalid token: %s", type(e).__name__)
            raise TokenInvalidError("Invalid token.") from e
        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as e:
            logger.warning(
                "Rejected token with malformed claims",
                extra={"claim_errors": e.error_count()},
            )
            raise TokenInvalidError("Invalid token.") from e

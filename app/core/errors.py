"""Error taxonomy for the authentication core.

Services raise these; the API layer maps them to HTTP status codes. Every error
carries a ``message`` that is safe to show a caller. Internal detail goes to the
log, never into ``message``.
"""


class AuthCoreError(Exception):
    """Base class for all errors raised by the auth core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(AuthCoreError):
    """Malformed request data (missing field, bad format, password length). HTTP 400."""


class DuplicateError(AuthCoreError):
    """Unique-constraint violation on username or email. HTTP 400."""


class InvalidCredentialsError(AuthCoreError):
    """Unknown username or wrong password at login. HTTP 401."""


class TokenError(AuthCoreError):
    """Base for token verification failures."""


class TokenExpiredError(TokenError):
    """Signature is valid but the embedded expiry has passed."""


class TokenInvalidError(TokenError):
    """Bad signature, wrong key, malformed token or claims."""


class Unauthorized(AuthCoreError):
    """No token, or a token that is invalid, expired or revoked. HTTP 401."""


class Forbidden(AuthCoreError):
    """Authenticated, but the role is below the one required. HTTP 403."""


class ConfigurationError(AuthCoreError):
    """Required configuration is missing. Fatal at startup."""


class InternalError(AuthCoreError):
    """Unexpected internal failure. HTTP 500 with a generic message."""

    def __init__(self, message: str = "Internal server error.") -> None:
        super().__init__(message)


class HashingError(InternalError):
    """The password hashing primitive failed (e.g. resource exhaustion)."""


class StorageError(InternalError):
    """A database operation failed and was rolled back."""

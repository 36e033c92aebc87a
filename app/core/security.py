"""Password hashing and verification (Argon2id) for authentication."""

import logging
import secrets
from functools import cached_property

from argon2 import PasswordHasher, Type
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from app.core.errors import HashingError, InvalidInputError

logger = logging.getLogger(__name__)

# Argon2id cost parameters. Fixed: changing them makes existing hashes report needs_rehash.
ARGON2_MEMORY_COST_KIB = 65536  # 64 MiB
ARGON2_TIME_COST = 3
ARGON2_PARALLELISM = 2
ARGON2_HASH_LEN = 32
ARGON2_SALT_LEN = 16

# Password length bounds, in characters.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 64


def validate_password(password: object) -> str:
    """
    Check password length. The lower bound ignores surrounding whitespace,
    the upper bound does not. Returns the password unchanged.
    """
    if not isinstance(password, str):
        raise InvalidInputError("Password must be a string.")
    if len(password.strip()) < PASSWORD_MIN_LEN or len(password) > PASSWORD_MAX_LEN:
        raise InvalidInputError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters long."
        )
    return password


class CredentialHasher:
    """
    One-way salted hashing of user passwords.

    The encoded output embeds the salt and cost parameters, so a stored hash
    is all verify() needs. Verification is delegated to argon2's own routine,
    which compares in constant time.
    """

    def __init__(
        self,
        memory_cost: int = ARGON2_MEMORY_COST_KIB,
        time_cost: int = ARGON2_TIME_COST,
        parallelism: int = ARGON2_PARALLELISM,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=ARGON2_HASH_LEN,
            salt_len=ARGON2_SALT_LEN,
            type=Type.ID,
        )

    def hash(self, password: str) -> str:
        """Hash a plain-text password for storage. Raises InvalidInputError or HashingError."""
        validate_password(password)
        try:
            return self._hasher.hash(password)
        except (Argon2HashingError, MemoryError) as e:
            logger.error("Password hashing failed: %s", type(e).__name__, exc_info=True)
            raise HashingError() from e

    def verify(self, password: str, stored: str) -> bool:
        """Verify a plain password against a stored hash."""
        if not isinstance(password, str) or not stored:
            return False
        try:
            return self._hasher.verify(stored, password)
        except VerifyMismatchError:
            return False
        except InvalidHashError:
            logger.warning("Stored password hash is malformed; treating as mismatch")
            return False
        except VerificationError:
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """
        Hash of a random secret made with this hasher's parameters. Login verifies
        against it when no user matches, so unknown usernames cost the same time.
        """
        return self._hasher.hash(secrets.token_urlsafe(16))

    def needs_rehash(self, stored: str) -> bool:
        """True when the stored hash was produced with other cost parameters."""
        try:
            return self._hasher.check_needs_rehash(stored)
        except InvalidHashError:
            return True


default_hasher = CredentialHasher()


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    return default_hasher.hash(plain_password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    return default_hasher.verify(plain_password, hashed)

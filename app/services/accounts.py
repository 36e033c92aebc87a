"""Account lifecycle: registration, login, password rotation, role changes."""

import logging
import re

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    DuplicateError,
    InternalError,
    InvalidCredentialsError,
    InvalidInputError,
    StorageError,
)
from app.core.security import CredentialHasher, default_hasher, validate_password
from app.core.tokens import IssuedToken, TokenIssuer
from app.models import Role, User
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]{3,20}")
EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

INVALID_CREDENTIALS = "Invalid username or password."


def validate_username(username: object) -> str:
    if not isinstance(username, str) or not USERNAME_PATTERN.fullmatch(username):
        raise InvalidInputError(
            "Invalid username. Only letters, numbers, and underscores are allowed (3-20 chars)."
        )
    return username


def validate_email(email: object) -> str:
    """Return the address lowercased; uniqueness is case-insensitive."""
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email.strip()):
        raise InvalidInputError("Invalid email format.")
    return email.strip().lower()


def _issue_and_store(
    db: Session,
    issuer: TokenIssuer,
    user: User,
    single_session: bool,
) -> IssuedToken:
    try:
        issued = issuer.issue(user.id, user.role)
    except InternalError:
        db.rollback()
        raise
    SessionStore(db, single_session=single_session).put(user.id, issued.token, issued.expires_at)
    return issued


def _insert_user(
    db: Session,
    username: str,
    password: str,
    email: str,
    role: Role,
    hasher: CredentialHasher,
) -> User:
    """Validate, hash and flush a new user; the caller owns the commit."""
    if not username or not password or not email:
        raise InvalidInputError("Username, password, and email are required.")
    username = validate_username(username)
    email = validate_email(email)
    validate_password(password)

    if db.query(User.id).filter(User.email == email).first() is not None:
        raise DuplicateError("Email is already taken.")
    if db.query(User.id).filter(User.username == username).first() is not None:
        raise DuplicateError("Username is already taken.")

    user = User(
        username=username,
        email=email,
        password_hash=hasher.hash(password),
        role=Role(role).value,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same username/email.
        db.rollback()
        raise DuplicateError("Username or email is already taken.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User insert failed")
        raise StorageError() from e
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    email: str,
    *,
    role: Role = Role.USER,
    hasher: CredentialHasher = default_hasher,
) -> User:
    """Create a user without starting a session (operator tooling)."""
    user = _insert_user(db, username, password, email, role, hasher)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User commit failed")
        raise StorageError() from e
    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return user


def register_user(
    db: Session,
    issuer: TokenIssuer,
    username: str,
    password: str,
    email: str,
    *,
    single_session: bool = True,
    hasher: CredentialHasher = default_hasher,
) -> tuple[User, IssuedToken]:
    """
    Create a USER account and its first session in one transaction.

    Raises InvalidInputError for missing or malformed fields, DuplicateError
    when the username or email is taken. Nothing is written on failure.
    """
    user = _insert_user(db, username, password, email, Role.USER, hasher)
    issued = _issue_and_store(db, issuer, user, single_session)
    logger.info("User registered", extra={"user_id": user.id})
    return user, issued


def authenticate(
    db: Session,
    issuer: TokenIssuer,
    username: str,
    password: str,
    *,
    single_session: bool = True,
    hasher: CredentialHasher = default_hasher,
) -> tuple[User, IssuedToken]:
    """
    Log in: verify the password and start a new session.

    Unknown username and wrong password raise the same InvalidCredentialsError.
    A hash made with outdated cost parameters is replaced in the same commit.
    """
    if not username or not password:
        raise InvalidInputError("Username and password are required.")
    validate_password(password)

    user = db.query(User).filter(User.username == username).first()
    if user is None:
        hasher.verify(password, hasher.dummy_hash)
        verified = False
    else:
        verified = hasher.verify(password, user.password_hash)
    if not verified:
        logger.info("Login failed", extra={"username_length": len(username)})
        raise InvalidCredentialsError(INVALID_CREDENTIALS)

    if hasher.needs_rehash(user.password_hash):
        user.password_hash = hasher.hash(password)

    issued = _issue_and_store(db, issuer, user, single_session)
    logger.info("User logged in", extra={"user_id": user.id})
    return user, issued


def rotate_password(
    db: Session,
    user: User,
    new_password: str,
    *,
    hasher: CredentialHasher = default_hasher,
) -> int:
    """Replace the user's password hash and revoke all their sessions. Returns revoked count."""
    user.password_hash = hasher.hash(new_password)
    return SessionStore(db).revoke_all(user.id)


def set_role(db: Session, username: str, role: Role | str) -> User:
    """
    Change a user's role. Existing sessions are revoked so no token keeps
    carrying the old role; the new role takes effect at the next login.
    """
    try:
        role = Role(role)
    except ValueError as e:
        raise InvalidInputError(f"Unknown role: {role!r}.") from e
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise InvalidInputError(f"User '{username}' not found.")
    user.role = role.value
    SessionStore(db).revoke_all(user.id)
    logger.info("User role changed", extra={"user_id": user.id, "role": role.value})
    return user


def list_users(db: Session) -> list[User]:
    """All users ordered by id."""
    try:
        return db.query(User).order_by(User.id).all()
    except SQLAlchemyError as e:
        logger.exception("Listing users failed")
        raise StorageError() from e

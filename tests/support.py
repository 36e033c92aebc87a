"""Shared fixtures for database-backed tests."""

from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import TokenConfig
from app.core.security import CredentialHasher
from app.models import Base, Role, User

TEST_SECRET = "test-signing-secret"

# Cheap parameters for service tests that only need some valid Argon2id hash.
FAST_HASHER = CredentialHasher(memory_cost=1024, time_cost=1, parallelism=1)


def token_config(secret: str = TEST_SECRET, lifetime: timedelta = timedelta(days=1)) -> TokenConfig:
    return TokenConfig(secret=secret, lifetime=lifetime)


def memory_session_factory() -> tuple[sessionmaker, Engine]:
    """One shared in-memory SQLite connection with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False), engine


def file_session_factory(path: str) -> tuple[sessionmaker, Engine]:
    """File-backed SQLite with a real connection pool, for multi-threaded tests."""
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False), engine


def add_user(db, username: str = "alice", role: Role = Role.USER) -> User:
    """Insert a user directly (no validation) and return it."""
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="not-a-real-hash",
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user

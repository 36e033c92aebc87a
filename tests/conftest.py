"""Test environment: an in-memory database and a signing secret before app modules load."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret")
os.environ.setdefault("APP_ENV", "dev")

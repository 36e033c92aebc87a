"""Core app configuration, errors and database."""

from app.core.config import TokenConfig, get_settings, settings
from app.core.database import get_db

__all__ = ["TokenConfig", "get_settings", "settings", "get_db"]

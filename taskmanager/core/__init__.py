"""Core app configuration, database, security, and errors."""

from taskmanager.core.config import get_settings, settings
from taskmanager.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

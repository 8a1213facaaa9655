"""Core app configuration, database, security and error types."""

from spendlog.core.config import get_settings, settings
from spendlog.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

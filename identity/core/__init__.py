"""Core package - Shared configuration and database access."""

from .config import Settings, get_settings
from .database import get_engine, get_session, init_db

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "get_engine",
    "get_session",
    "init_db",
]

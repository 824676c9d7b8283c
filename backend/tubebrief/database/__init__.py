"""
Database module initialization.
Exports database components for use throughout the application.
"""

from tubebrief.database.base import Base, TimestampMixin, UUIDMixin, utc_now
from tubebrief.database.dependencies import get_db
from tubebrief.database.session import (
    check_db_connection,
    close_db,
    get_db_info,
    get_db_session,
    init_db,
)

__all__ = [
    # Connection management
    "init_db",
    "close_db",
    # Dependencies
    "get_db",
    "get_db_session",
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    # Utilities
    "check_db_connection",
    "get_db_info",
]

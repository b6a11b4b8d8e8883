"""Database module for the advisory service.

This module provides:
- SQLAlchemy async database connection
- Search history and alert subscriber models
"""

from agrisense.database.connection import (
    close_db,
    create_tables,
    get_db,
    get_db_session,
    init_db,
)
from agrisense.database.models import (
    AlertSubscriber,
    Base,
    SearchHistory,
)

__all__ = [
    # Connection
    "get_db",
    "get_db_session",
    "init_db",
    "close_db",
    "create_tables",
    # Models
    "Base",
    "SearchHistory",
    "AlertSubscriber",
]

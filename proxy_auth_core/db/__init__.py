"""
SQLAlchemy models for the credential store.

This module provides a common entry point for all models.
"""

from .db_auth_models import AuthUser
from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import (
    Base,
    DatabaseManager,
    close_db,
    get_db_manager,
    import_all_models,
    initialize_db,
)
from .db_site_models import Site

__all__ = [
    # Base definitions
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    # Connection management
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "import_all_models",
    "initialize_db",
    # Models
    "AuthUser",
    "Site",
]

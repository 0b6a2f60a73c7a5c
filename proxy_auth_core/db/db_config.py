"""
Engine and session management for the credential store.

The store is addressed by a single SQLAlchemy URL from
``AppConfig.database``. SQLite is the default; an in-memory SQLite store is
kept on one shared connection so every session sees the same tables.
"""

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import DatabaseConfig, get_config
from ..exceptions import ErrorCode, ServiceError
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()


class DatabaseManager:
    """Owns the engine and the scoped session factory of the credential store."""

    def __init__(self, config: DatabaseConfig, development_mode: bool = False):
        self.config = config
        self.development_mode = development_mode
        self.engine = self._create_engine()
        self.scoped_session = scoped_session(sessionmaker(bind=self.engine))

    def _create_engine(self):
        url = self.config.connection_string
        if url.startswith("sqlite") and ":memory:" in url:
            return create_engine(
                url,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, echo=self.config.echo)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.development_mode:
            raise ServiceError(
                "Cannot drop tables: not in development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self) -> None:
        self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def import_all_models():
    """Register every model with the metadata before creating tables."""
    from sqlalchemy.orm import configure_mappers

    from .db_auth_models import AuthUser  # noqa
    from .db_site_models import Site  # noqa

    configure_mappers()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Raises:
        ServiceError: If initialize_db() has not been called
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def initialize_db(
    config: Optional[DatabaseConfig] = None, development_mode: bool = False
) -> DatabaseManager:
    """
    Open the credential store and create its tables.

    Args:
        config: Store settings; defaults to ``get_config().database``
        development_mode: Allow ``drop_tables``
    """
    global _db_manager

    config = config or get_config().database
    get_logger().debug("Initializing credential store")
    _db_manager = DatabaseManager(config, development_mode=development_mode)

    import_all_models()
    _db_manager.create_tables()
    return _db_manager


def close_db() -> None:
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None

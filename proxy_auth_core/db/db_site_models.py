"""
Minimal view of the sites table, used to resolve a site name to its URL.
"""

from sqlalchemy import Boolean, Column, String

from ..constants import Limits
from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class Site(Base, UUIDMixin, TimestampMixin):
    """A hosted site; only the fields needed for scope resolution."""

    __tablename__ = "sites"

    site_url = Column(String(Limits.SITE_URL_MAX_LENGTH), nullable=False, unique=True)
    site_enabled = Column(Boolean, nullable=False, default=True)

"""
Credential store model.

One row per (site_url, username, scope). A user created for a site owns two
rows, one per scope, sharing username and password.
"""

from sqlalchemy import Column, String, UniqueConstraint

from ..constants import Limits
from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class AuthUser(Base, UUIDMixin, TimestampMixin):
    """HTTP basic-auth credential, stored in plaintext like the htpasswd input."""

    __tablename__ = "auth_users"

    site_url = Column(String(Limits.SITE_URL_MAX_LENGTH), nullable=False, index=True)
    username = Column(String(Limits.USERNAME_MAX_LENGTH), nullable=False)
    password = Column(String(255), nullable=False)
    scope = Column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint("site_url", "username", "scope", name="uq_auth_user_scope"),
    )

    def __repr__(self) -> str:
        return (
            f"AuthUser(site_url='{self.site_url}', username='{self.username}', "
            f"scope='{self.scope}', password='***')"
        )

"""
Pydantic schemas for credential records and credential queries.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_SITE_URL, Limits, Scope, ScopeSelection
from ..exceptions import NoMatchingCredentialError


class BaseAuthSchema(BaseModel):
    """Base schema for credential records."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )


class AuthUserCreate(BaseAuthSchema):
    """Data needed to insert one credential record."""

    site_url: str = Field(..., min_length=1, max_length=Limits.SITE_URL_MAX_LENGTH)
    username: str = Field(..., min_length=1, max_length=Limits.USERNAME_MAX_LENGTH)
    password: str = Field(..., min_length=1, description="Plaintext password")
    scope: Scope

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        """htpasswd uses ':' as the field separator."""
        if ":" in v:
            raise ValueError("Username cannot contain ':'")
        return v


class AuthUserRead(BaseModel):
    """A stored credential record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    site_url: str
    username: str
    password: str
    scope: Scope
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_row(self) -> Dict[str, Any]:
        """Columns shown by `auth list`."""
        return {"username": self.username, "password": self.password, "scope": self.scope.value}


class AuthQuery(BaseModel):
    """
    Scope-filtered credential lookup used by update, delete and list.

    The query owns the decision of what an empty result means: callers use
    ``require`` and get a NoMatchingCredentialError describing the attempted
    username, site and scope.
    """

    model_config = ConfigDict(frozen=True)

    site_url: str
    scope: ScopeSelection = ScopeSelection.ALL
    username: Optional[str] = None

    def filters(self) -> Dict[str, Any]:
        """Column filters; scope is omitted when every scope is selected."""
        conditions: Dict[str, Any] = {"site_url": self.site_url}
        if self.username:
            conditions["username"] = self.username
        if self.scope is not ScopeSelection.ALL:
            conditions["scope"] = self.scope.value
        return conditions

    def describe(self) -> str:
        user_msg = f" with username: {self.username}" if self.username else ""
        site_msg = "global" if self.site_url == DEFAULT_SITE_URL else self.site_url
        scope_msg = "" if self.scope is ScopeSelection.ALL else f" for {self.scope.value}"
        return f"Auth{user_msg} does not exists on {site_msg}{scope_msg}"

    def require(self, records: list) -> list:
        """Return ``records`` unchanged, or raise if the query matched nothing."""
        if not records:
            raise NoMatchingCredentialError(
                self.describe(),
                site_url=self.site_url,
                scope=self.scope.value,
                username=self.username,
            )
        return records

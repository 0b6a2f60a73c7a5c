"""Pydantic schemas for the proxy auth core."""

from .auth_schemas import AuthQuery, AuthUserCreate, AuthUserRead
from .scope_schemas import ScopeContext, SiteInfo, WhitelistResult

__all__ = [
    "AuthQuery",
    "AuthUserCreate",
    "AuthUserRead",
    "ScopeContext",
    "SiteInfo",
    "WhitelistResult",
]

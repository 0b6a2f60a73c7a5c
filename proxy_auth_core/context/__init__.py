"""Command context resolution."""

from .scope_context import (
    DatabaseSiteLookup,
    SiteLookup,
    StaticSiteLookup,
    get_scope,
    resolve,
    resolve_scope,
)

__all__ = [
    "DatabaseSiteLookup",
    "SiteLookup",
    "StaticSiteLookup",
    "get_scope",
    "resolve",
    "resolve_scope",
]

"""
proxy_auth_core - HTTP basic-auth credentials and IP allow-lists for sites
served behind a shared reverse proxy.
"""

from .config import AppConfig, get_config, set_config
from .constants import GLOBAL_TARGET, Scope, ScopeSelection
from .context import resolve_scope
from .services import AuthService, WhitelistService

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "AuthService",
    "GLOBAL_TARGET",
    "Scope",
    "ScopeSelection",
    "WhitelistService",
    "get_config",
    "resolve_scope",
    "set_config",
]

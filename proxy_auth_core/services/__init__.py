"""Service layer: credential and allow-list commands."""

from .auth_service import AuthService
from .whitelist_service import (
    WhitelistService,
    parse_allow_list,
    parse_ip_argument,
    render_allow_list,
)

__all__ = [
    "AuthService",
    "WhitelistService",
    "parse_allow_list",
    "parse_ip_argument",
    "render_allow_list",
]

"""
Constants and enums for the proxy auth core.

This module centralizes all magic strings and constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class Scope(str, Enum):
    """Independent auth/ACL contexts of a site."""

    SITE = "site"
    ADMIN_TOOLS = "admin-tools"


class ScopeSelection(str, Enum):
    """Scope requested by a caller; ALL fans out to every Scope."""

    SITE = "site"
    ADMIN_TOOLS = "admin-tools"
    ALL = "all"

    @property
    def scopes(self) -> tuple:
        """Concrete scopes covered by this selection."""
        if self is ScopeSelection.ALL:
            return (Scope.SITE, Scope.ADMIN_TOOLS)
        return (Scope(self.value),)


class WhitelistCommand(str, Enum):
    """Allow-list sub-commands."""

    CREATE = "create"
    APPEND = "append"
    LIST = "list"
    REMOVE = "remove"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    DATABASE_URL = "PROXY_AUTH_DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    PROXY_CONTAINER = "PROXY_AUTH_PROXY_CONTAINER"
    CONF_ROOT = "PROXY_AUTH_CONF_ROOT"
    DOCKER_BINARY = "PROXY_AUTH_DOCKER_BINARY"


# Target name that addresses the global pseudo-site
GLOBAL_TARGET = "global"

# site_url stored for global credentials and allow-lists
DEFAULT_SITE_URL = "default"

# Username used when the caller does not supply one
DEFAULT_USERNAME = "easyengine"

# Passing this as the first IP to remove drops the whole allow-list
REMOVE_ALL_SENTINEL = "all"

# Artifact naming
ADMIN_TOOLS_SUFFIX = "_admin_tools"
ACL_SUFFIX = "_acl"
GLOBAL_ACL_NAME = "default_acl"

# Allow-list file structure
ACL_HEADER = "satisfy any;"
ACL_TRAILER = "deny all;"


class Limits:
    """System limits and thresholds."""

    RANDOM_PASSWORD_LENGTH = 18
    USERNAME_MAX_LENGTH = 255
    SITE_URL_MAX_LENGTH = 255


class Timeouts:
    """Timeout values in seconds."""

    EXTERNAL_COMMAND = 60

"""
Consolidated exception system with error codes and context.

This module provides a unified exception hierarchy for the package. Every
error carries the site and scope it was raised for, so operators can re-target
the failed command.
"""

import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

# Removed logger import to avoid circular dependency - calling code should handle logging


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    CONFLICT = "3002"

    # Business logic errors (4xxx)
    PRECONDITION_FAILED = "4004"

    # External service errors (5xxx)
    EXTERNAL_TOOL_ERROR = "5000"
    ARTIFACT_WRITE_ERROR = "5001"
    RELOAD_ERROR = "5002"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP-style status used to pick the log level
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        # Log the error (using lazy import to avoid circular dependencies)
        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "error_id"]},
        }

        if self.status_code >= 500:
            logger.error(f"Error {self.error_code.value}: {self.message}", extra=log_data)
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """
        Convert to dict for machine-readable output.

        Args:
            include_cause: Include cause information (useful for debugging)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v for k, v in self.context.items() if k not in ["cause", "error_id"]
                },
            }
        }

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Validation errors, raised before any state is touched."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class ExternalServiceError(BaseError):
    """Errors raised by the proxy container or the tools run inside it."""

    def __init__(
        self,
        message: str,
        service_name: str,
        error_code: ErrorCode = ErrorCode.EXTERNAL_TOOL_ERROR,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize external service error with service context."""
        context["service_name"] = service_name
        super().__init__(message, error_code, 502, cause, **context)


# ==================== SITE / SCOPE EXCEPTIONS ====================


class SiteNotFoundError(BaseError):
    """Raised when the target site does not exist or is disabled."""

    def __init__(self, message: str = "Site not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


# ==================== CREDENTIAL EXCEPTIONS ====================


class CredentialAlreadyExistsError(BaseError):
    """Raised by create when the username is already taken on the site, in any scope."""

    def __init__(self, message: str = "Credential already exists", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.CONFLICT, status_code=409, **kwargs)


class NoMatchingCredentialError(BaseError):
    """Raised when an update/delete/list query matches no stored credential."""

    def __init__(self, message: str = "No matching credential", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class DuplicateCredentialError(RepositoryError):
    """Raised by the store when (site_url, username, scope) is already present."""

    def __init__(self, message: str = "Duplicate credential", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.DUPLICATE, status_code=409, **kwargs)


class CredentialRecordNotFoundError(RepositoryError):
    """Raised when a record reference no longer points at a stored credential."""

    def __init__(self, message: str = "Credential record not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


# ==================== ALLOW-LIST EXCEPTIONS ====================


class EmptyAllowListError(BaseError):
    """Raised when listing a target that has no allow-list entries."""

    def __init__(self, message: str = "No whitelisted IPs found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class NoMatchingIPsError(BaseError):
    """Raised when none of the requested IPs are present in the allow-list."""

    def __init__(self, message: str = "IPs not found in whitelist", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


# ==================== EXTERNAL TOOL EXCEPTIONS ====================


class ExternalToolUnavailableError(ExternalServiceError):
    """Raised when htpasswd is missing from the proxy container."""

    def __init__(self, message: str = "htpasswd is not available", **kwargs):
        kwargs.setdefault("service_name", "htpasswd")
        super().__init__(message=message, error_code=ErrorCode.PRECONDITION_FAILED, **kwargs)


class ArtifactWriteError(ExternalServiceError):
    """
    Raised when a credential or allow-list artifact could not be written.

    When raised after the credential store was mutated, the store is ahead of
    the artifacts. Re-running the same command converges.
    """

    def __init__(self, message: str = "Failed to write artifact", **kwargs):
        kwargs.setdefault("service_name", "artifact")
        super().__init__(message=message, error_code=ErrorCode.ARTIFACT_WRITE_ERROR, **kwargs)


class ReloadError(ExternalServiceError):
    """Raised when the reverse proxy could not be reloaded."""

    def __init__(self, message: str = "Failed to reload reverse proxy", **kwargs):
        kwargs.setdefault("service_name", "reverse-proxy")
        super().__init__(message=message, error_code=ErrorCode.RELOAD_ERROR, **kwargs)

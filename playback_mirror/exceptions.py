"""Custom exceptions for Playback Mirror with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    MIRROR_ERROR = "MIRROR_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authentication errors
    AUTH_ERROR = "AUTH_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Remote API errors
    NETWORK_ERROR = "NETWORK_ERROR"

    # Local persistence / configuration errors
    SESSION_STORE_ERROR = "SESSION_STORE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class MirrorException(Exception):
    """Base exception for playback mirror errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.MIRROR_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize mirror exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationException(MirrorException):
    """User input rejected (empty client ID, bad seek position)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details,
        )


class AuthException(MirrorException):
    """The PKCE handshake could not be completed."""

    def __init__(self, message: str = "Spotify authentication failed", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.AUTH_ERROR,
            status_code=401,
            details=details,
        )


class UnauthorizedException(MirrorException):
    """Spotify rejected the bearer token."""

    def __init__(self, message: str = "Spotify access token is no longer valid", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.UNAUTHORIZED,
            status_code=401,
            details=details,
        )


class TransientNetworkException(MirrorException):
    """Spotify request failed; the next scheduled poll recovers."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.NETWORK_ERROR,
            status_code=502,
            details=details,
        )


class SessionStoreException(MirrorException):
    """Session file could not be written."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.SESSION_STORE_ERROR,
            status_code=500,
            details=details,
        )


class ConfigurationException(MirrorException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)

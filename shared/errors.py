"""
Shared error handling for the catalog cache service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class CacheServiceException(Exception):
    """Base exception for cache service errors."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(CacheServiceException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ValidationError(CacheServiceException):
    """Request validation errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(CacheServiceException):
    """Missing resource errors."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class PurgeConfigError(CacheServiceException):
    """A CDN purge configuration lacks a required credential."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_PURGE_CONFIG", message, details)


class UnsupportedCDNError(CacheServiceException):
    """The configured CDN type has no purge client."""

    status_code = 500

    def __init__(self, cdn_type: Any):
        super().__init__(
            "UNSUPPORTED_CDN",
            f"Unsupported 'cdn.prod.type' value: {cdn_type}",
            {"type": cdn_type}
        )


class PurgeError(CacheServiceException):
    """A purge request failed at the transport or provider level."""

    status_code = 500

    def __init__(self, provider: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.provider = provider
        super().__init__("PURGE_FAILED", message, details)


class ConfigFetchError(CacheServiceException):
    """Fetching the site configuration failed."""

    status_code = 502

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIG_FETCH_FAILED", message, details)

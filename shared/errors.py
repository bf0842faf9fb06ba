"""
Shared error handling for the Users Cache Service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for the Users Cache Service."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class CacheAccessError(ServiceException):
    """A cache tier could not be reached or rejected an operation."""

    def __init__(self, cache_name: str, operation: str, message: str = "Cache access failed",
                 details: Optional[Dict[str, Any]] = None):
        self.cache_name = cache_name
        self.operation = operation
        merged = {"cache": cache_name, "operation": operation}
        merged.update(details or {})
        super().__init__("CACHE_ACCESS_ERROR", f"{cache_name}.{operation}: {message}", merged)


class ValueRetrievalError(ServiceException):
    """Raised when a cache value loader fails for a key."""

    def __init__(self, key: Any, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(
            "CACHE_VALUE_RETRIEVAL_ERROR",
            f"Value for key '{key}' could not be loaded: {cause}",
            {"key": str(key), "cause": type(cause).__name__}
        )


class CacheConfigurationError(ServiceException):
    """A backing cache manager could not resolve a cache name."""

    def __init__(self, cache_name: str, message: str = "Cache could not be resolved",
                 details: Optional[Dict[str, Any]] = None):
        self.cache_name = cache_name
        merged = {"cache": cache_name}
        merged.update(details or {})
        super().__init__("CACHE_CONFIGURATION_ERROR", f"{cache_name}: {message}", merged)

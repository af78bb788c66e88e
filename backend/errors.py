"""
Exception classes shared by the board planner and the HTTP layer
"""
from typing import Optional, Dict, Any


class BoardError(Exception):
    """Base exception class for vision board errors"""
    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to standard error format"""
        return {
            "code": self.code,
            "message": str(self),
            "details": self.details
        }


class InvalidInputError(BoardError):
    """Raised for empty keywords, non-positive counts or dimensions"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_INPUT", details=details)


class ProviderError(BoardError):
    """Raised when the image search provider can't serve a page"""


class ProviderAuthError(ProviderError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PROVIDER_UNAUTHORIZED", details=details)


class ProviderRateLimitedError(ProviderError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PROVIDER_RATE_LIMITED", details=details)


class ProviderHttpError(ProviderError):
    def __init__(self, message: str, status: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if status is not None:
            details["status"] = status
        super().__init__(message, code="PROVIDER_HTTP_ERROR", details=details)
        self.status = status


class ProviderNetworkError(ProviderError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PROVIDER_NETWORK_ERROR", details=details)

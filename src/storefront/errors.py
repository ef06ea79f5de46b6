"""
Storefront Error Classes

Custom exceptions for the cart engine.

- UpstreamError: storefront API failures (network, HTTP status, bad JSON)
- ContractViolation: a response that does not match the expected shape
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for cart engine errors."""
    pass


class UpstreamError(StorefrontError):
    """Raised when the storefront API call fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def error_type(self) -> Optional[str]:
        """Structured error type from the response body, if any."""
        return self.payload.get("errorType")

    @property
    def server_message(self) -> Optional[str]:
        return self.payload.get("message")


class ContractViolation(StorefrontError):
    """Raised when an API response violates the expected contract."""
    pass

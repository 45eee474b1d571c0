"""
Error Types
Typed failures raised by recipe providers and the request lifecycle
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Every failure category the generation pipeline can produce"""
    UNCONFIGURED = "unconfigured"
    DEPRECATED = "deprecated"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"
    RATE_LIMITED = "rate_limited"
    MISCONFIGURED = "misconfigured"
    CANCELLED = "cancelled"


class ChefError(Exception):
    """Base exception for recipe generation errors"""
    pass


class ProviderError(ChefError):
    """Raised by a provider adapter when it cannot produce a recipe"""
    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR


class Unconfigured(ProviderError):
    """Credential missing or still set to a placeholder"""
    kind = ErrorKind.UNCONFIGURED


class Deprecated(ProviderError):
    """Provider signalled that it is permanently unavailable (HTTP 410)"""
    kind = ErrorKind.DEPRECATED


class RateLimited(ProviderError):
    """Raised when the provider answers HTTP 429"""
    kind = ErrorKind.RATE_LIMITED


class MalformedResponse(ProviderError):
    """Response body did not have the expected shape"""
    kind = ErrorKind.MALFORMED_RESPONSE


class UpstreamError(ProviderError):
    """Non-2xx response or transport failure"""
    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        if status is None:
            super().__init__(message)
        else:
            super().__init__(f"API error ({status}): {message}")


class GenerationCancelled(ChefError):
    """Raised at a suspend point once the request has been superseded"""
    kind = ErrorKind.CANCELLED

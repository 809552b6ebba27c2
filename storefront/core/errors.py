"""Storefront client exceptions

These never cross a state-container boundary; services convert them into
OperationResult values.
"""

from dataclasses import dataclass
from typing import Any, Optional


class StorefrontError(Exception):
    """Base exception for storefront client errors"""
    pass


class APIResponseError(StorefrontError):
    """The API rejected a request (4xx/5xx)"""

    def __init__(self, status_code: int, error: Optional[str] = None):
        self.status_code = status_code
        self.error = error
        super().__init__(f"API request failed: {status_code} - {error or 'no detail'}")


class AuthorizationError(APIResponseError):
    """Stored credential was rejected; it has already been invalidated"""
    pass


class NetworkError(StorefrontError):
    """Transport-level failure: connection refused, timeout, ..."""
    pass


class MalformedResponseError(StorefrontError):
    """Response body was not the JSON shape we expected"""
    pass


@dataclass
class OperationResult:
    """Outcome of a state-container or identity operation"""
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(success=True)

    @classmethod
    def fail(cls, error: str) -> "OperationResult":
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


def error_message(exc: StorefrontError, fallback: str) -> str:
    """
    Human-readable reason for a failed call.

    Uses the server's error string for business rejections and the fallback
    for everything else, so no transport detail reaches the end user.
    """
    if isinstance(exc, APIResponseError) and exc.error:
        return exc.error
    return fallback


@dataclass
class QueryResult(OperationResult):
    """OperationResult that also carries the data that was read"""
    data: Any = None

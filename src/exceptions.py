"""
Application Error Types.

Every failure surfaced by the commit statistics engine is one of:

- UpstreamError: a remote call failed or returned a non-success status
- ValidationError: an aggregate failed its internal invariant check
- ConfigurationError: invalid settings, detected before any network activity
"""

from enum import Enum
from typing import Any, Optional


class CommitscopeError(Exception):
    """Base class for all application errors."""


class UpstreamErrorKind(Enum):
    """Reason a remote call failed."""

    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    RATE_LIMITED = "rate_limited"


class UpstreamError(CommitscopeError):
    """
    Raised when the remote source fails.

    Attributes:
        kind (UpstreamErrorKind): Failure category
        endpoint (str): Endpoint path including query parameters
        status (Optional[int]): HTTP status code, when one was received
        body (Any): Response body, when one was received
    """

    def __init__(
        self,
        kind: UpstreamErrorKind,
        endpoint: str,
        status: Optional[int] = None,
        body: Any = None,
    ):
        self.kind = kind
        self.endpoint = endpoint
        self.status = status
        self.body = body

        if kind is UpstreamErrorKind.HTTP_STATUS:
            message = f"GitHub API {status} for {endpoint}: {body}"
        else:
            message = f"GitHub API {kind.value} for {endpoint}"
            if body:
                message = f"{message}: {body}"
        super().__init__(message)


class ValidationError(CommitscopeError):
    """Raised when an aggregate violates its invariants."""


class ConfigurationError(CommitscopeError):
    """Raised for invalid configuration detected at startup."""

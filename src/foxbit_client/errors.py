from __future__ import annotations


class ExchangeClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ExchangeValidationError(ExchangeClientError, ValueError):
    """Caller arguments rejected before anything is sent."""


class ExchangeHTTPError(ExchangeClientError):
    """HTTP-level errors returned by the exchange."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body


class ExchangeAuthError(ExchangeHTTPError):
    """Authentication/authorization errors (401/403)."""


class ExchangeNetworkError(ExchangeClientError):
    """Network/timeout/connection related errors."""


class ExchangeDecodeError(ExchangeClientError):
    """Response body is not JSON, or not the shape the endpoint returns."""

    def __init__(
        self,
        message: str,
        *,
        body: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.body = body

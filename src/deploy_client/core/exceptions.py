"""Custom exceptions for Deploy Client."""

from typing import Any, Optional


class DeployClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(DeployClientError):
    """Configuration error."""
    pass


class AddressError(ConfigurationError):
    """Remote instance address could not be parsed."""
    pass


class CallError(DeployClientError):
    """An error tied to a single remote operation."""

    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.operation = operation


class RateLimitExceeded(CallError):
    """Admission denied by the outbound rate limiter."""

    def __init__(self, operation: Optional[str] = None):
        super().__init__("rate limit exceeded", operation=operation, code="rate_limited")


class TransportError(CallError):
    """Connection, timeout or decoding failure below the domain layer."""
    pass


class RemoteError(CallError):
    """Structured error returned by the remote service."""

    def __init__(self, body: Any, operation: Optional[str] = None):
        message = getattr(body, "message", None) or str(body)
        super().__init__(message, operation=operation, code=getattr(body, "code", None))
        self.body = body


class UnexpectedResponseError(CallError):
    """Decoded payload matched neither the success nor the error shape."""

    def __init__(self, raw: Any, diagnostic: str, operation: Optional[str] = None):
        super().__init__(
            f"Received unexpected response; {diagnostic}",
            operation=operation,
            code="unexpected_response",
        )
        self.raw = raw
        self.diagnostic = diagnostic


class RetryExhaustedError(CallError):
    """Every attempt of a retried call failed."""

    def __init__(self, attempts: int, last_error: Exception, operation: Optional[str] = None):
        super().__init__(
            f"giving up after {attempts} attempts: {last_error}",
            operation=operation,
            code="retry_exhausted",
        )
        self.attempts = attempts
        self.last_error = last_error


class OperationCancelled(DeployClientError):
    """The call context was cancelled."""

    def __init__(self, message: str = "operation cancelled"):
        super().__init__(message, code="cancelled")


class DeadlineExceeded(OperationCancelled):
    """The call context deadline passed."""

    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)
        self.code = "deadline_exceeded"

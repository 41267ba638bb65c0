"""Exceptions raised by the CanLII client.

Every failure is raised to the caller of the operation that failed; nothing
is retried or swallowed.
"""


class CanLIIError(Exception):
    """Base class for all client errors."""


class ValidationError(CanLIIError, ValueError):
    """Invalid or conflicting arguments, detected before any request is sent."""


class TransportError(CanLIIError):
    """The request failed and no structured provider error could be decoded.

    ``http_status`` is ``None`` when no response was received at all
    (connection refused, DNS failure, ...).
    """

    def __init__(self, http_status: int | None = None, detail: str = ""):
        self.http_status = http_status
        self.detail = detail
        if http_status is None:
            msg = f"Request failed: {detail}" if detail else "Request failed"
        else:
            msg = f"HTTP {http_status}"
            if detail:
                msg += f": {detail}"
        super().__init__(msg)


class QuotaExceeded(CanLIIError):
    """The API key hit the provider's rate limit (HTTP 429)."""

    def __init__(self, http_status: int = 429):
        self.http_status = http_status
        super().__init__(f"HTTP {http_status}: API quota exceeded")


class ProviderError(CanLIIError):
    """Structured ``{error, message}`` failure returned by the API."""

    def __init__(self, http_status: int, error_code: str, error_message: str):
        self.http_status = http_status
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(f"{http_status} {error_code}: {error_message}")


class MalformedResponse(CanLIIError):
    """The API answered 2xx but an item does not have the expected shape."""

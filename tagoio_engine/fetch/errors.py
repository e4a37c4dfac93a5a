"""Exceptions raised by the request engine.

Callers see exactly two failure shapes, both deriving from ApiRequestError:

- RequestFailedError: transport, timeout or server failures that survived
  every retry. Carries the ClassifiedError record.
- ApplicationError: the API rejected the call (HTTP 4xx, or a response body
  whose ``status`` is not ``true``). Carries the API's own payload verbatim.
"""

from typing import Any

from tagoio_engine.fetch.models import ClassifiedError


class ApiRequestError(Exception):
    """Base exception for all request engine failures."""


class RequestFailedError(ApiRequestError):
    """Raised when every attempt failed with a retryable error.

    The classified record of the last attempt is kept on ``error``.
    """

    def __init__(self, error: ClassifiedError) -> None:
        """Initialize with the classified error of the last attempt.

        Args:
            error: Classified error record.
        """
        self.error = error
        super().__init__(
            f"{error.method} {error.url} failed: {error.code.value} "
            f"({error.status}: {error.status_text})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire-compatible error record."""
        return self.error.to_dict()


class ApplicationError(ApiRequestError):
    """Raised when the API rejects a request.

    ``payload`` is whatever the API returned: the ``message`` field, the
    ``result`` field, the whole body, or the HTTP status text when the body
    was empty.
    """

    def __init__(self, payload: Any, status_code: int | None = None) -> None:
        """Initialize with the unwrapped application payload.

        Args:
            payload: Unwrapped application error value.
            status_code: HTTP status of the response, if known.
        """
        self.payload = payload
        self.status_code = status_code
        message = payload if isinstance(payload, str) else repr(payload)
        super().__init__(message)


class HttpResponseError(Exception):
    """Transport signal for an HTTP exchange that completed with an error status.

    Never reaches callers: the classifier turns it into either a
    RequestFailedError or an ApplicationError.
    """

    def __init__(self, status_code: int, reason: str, body: Any) -> None:
        """Initialize the response error.

        Args:
            status_code: HTTP status code.
            reason: HTTP reason phrase.
            body: Parsed response body.
        """
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"HTTP {status_code} {reason}".strip())

"""Failure classification for request attempts.

Maps whatever an attempt raised onto the closed taxonomy and decides
whether the attempt may be retried. Decision order, first match wins:

1. completed exchanges with an error status -> HTTP_ERROR; 4xx surfaces the
   unwrapped application payload and is terminal, 5xx is retryable
2. timeouts -> TIMEOUT, retryable
3. connectivity failures -> NETWORK_ERROR, retryable
4. anything else -> UNKNOWN, retryable
"""

from dataclasses import dataclass

import httpx

from tagoio_engine.fetch.constants import (
    CLIENT_ERROR_STATUS,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_SERVER_ERROR_MIN,
    NETWORK_ERROR_STATUS_TEXT,
    TIMEOUT_STATUS_TEXT,
    UNKNOWN_STATUS_TEXT,
)
from tagoio_engine.fetch.errors import ApplicationError, HttpResponseError
from tagoio_engine.fetch.models import ClassifiedError, ErrorCode, ErrorOrigin
from tagoio_engine.fetch.transport import unwrap_error_payload


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one failed attempt.

    ``application_error`` is set only for terminal 4xx responses; it is the
    value to raise instead of the classified record.
    """

    error: ClassifiedError
    retryable: bool
    application_error: ApplicationError | None = None


def _is_timeout(cause: BaseException) -> bool:
    if isinstance(cause, httpx.TimeoutException | TimeoutError):
        return True
    return "timeout" in str(cause).lower()


def _client_error(url: str, method: str, code: ErrorCode, text: str) -> ClassifiedError:
    return ClassifiedError(
        origin=ErrorOrigin.CLIENT_REQUEST,
        url=url,
        method=method,
        status=CLIENT_ERROR_STATUS,
        code=code,
        status_text=text,
    )


def classify_error(cause: BaseException, url: str, method: str) -> Classification:
    """Classify a failed attempt.

    Args:
        cause: Exception raised by the attempt.
        url: Request URL.
        method: HTTP method.

    Returns:
        Classification with the error record and retry decision.
    """
    method = method.upper()

    # Ahead of timeouts: a "Gateway Timeout" reason is still an HTTP error
    if isinstance(cause, HttpResponseError):
        error = ClassifiedError(
            origin=ErrorOrigin.SERVER_RESPONSE,
            url=url,
            method=method,
            status=cause.status_code,
            code=ErrorCode.HTTP_ERROR,
            status_text=cause.reason,
        )
        if HTTP_STATUS_BAD_REQUEST <= cause.status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            payload = unwrap_error_payload(cause.body, cause.reason)
            return Classification(
                error=error,
                retryable=False,
                application_error=ApplicationError(payload, cause.status_code),
            )
        return Classification(error=error, retryable=True)

    if _is_timeout(cause):
        return Classification(
            error=_client_error(url, method, ErrorCode.TIMEOUT, TIMEOUT_STATUS_TEXT),
            retryable=True,
        )

    if isinstance(cause, httpx.TransportError | ConnectionError):
        return Classification(
            error=_client_error(
                url, method, ErrorCode.NETWORK_ERROR, NETWORK_ERROR_STATUS_TEXT
            ),
            retryable=True,
        )

    return Classification(
        error=_client_error(
            url, method, ErrorCode.UNKNOWN, str(cause) or UNKNOWN_STATUS_TEXT
        ),
        retryable=True,
    )

"""Single HTTP attempt and TagoIO response unwrapping."""

import asyncio
import json
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
import structlog

from tagoio_engine.fetch.constants import (
    HTTP_STATUS_OK,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_REDIRECT_MAX,
)
from tagoio_engine.fetch.errors import ApplicationError, HttpResponseError
from tagoio_engine.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


def is_json_content_type(content_type: str | None) -> bool:
    """Check whether a content-type header announces JSON."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def parse_body(response: httpx.Response) -> Any:
    """Decode a response body.

    JSON is decoded only when the content-type says so. An empty body is
    None; a body that claims JSON but does not parse is returned as text.

    Args:
        response: HTTP response.

    Returns:
        Decoded JSON value, raw text, or None.
    """
    text = response.text
    if not text:
        return None
    if not is_json_content_type(response.headers.get("content-type")):
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def unwrap_result(body: Any, status_text: str, status_code: int | None = None) -> Any:
    """Extract the result from a TagoIO response envelope.

    Args:
        body: Parsed response body.
        status_text: HTTP reason phrase, used when the body is empty.
        status_code: HTTP status, attached to raised errors.

    Returns:
        The ``result`` field of a ``{"status": true}`` envelope, or the text
        of a non-JSON body.

    Raises:
        ApplicationError: If the body is empty or ``status`` is not true.
    """
    if _is_empty_body(body):
        raise ApplicationError(status_text, status_code)

    if isinstance(body, str):
        return body

    if not isinstance(body, Mapping) or body.get("status") is not True:
        if isinstance(body, Mapping):
            raise ApplicationError(
                body.get("message") or body.get("result") or body, status_code
            )
        raise ApplicationError(body, status_code)

    return body.get("result")


def _is_empty_body(body: Any) -> bool:
    # null, false, 0 and "" count as no body; {} and [] do not
    return body is None or (isinstance(body, str | int | float) and not body)


def unwrap_error_payload(body: Any, status_text: str) -> Any:
    """Unwrap an error response body into the payload surfaced to callers.

    Args:
        body: Parsed error response body.
        status_text: HTTP reason phrase.

    Returns:
        Whatever unwrapping the envelope produces, error or result.
    """
    try:
        return unwrap_result(body, status_text)
    except ApplicationError as e:
        return e.payload


class HttpTransport:
    """Performs one bounded-time HTTP exchange per call."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        raw_result_paths: Iterable[str] = (),
    ) -> None:
        """Initialize the transport.

        Args:
            client: Shared async HTTP client.
            raw_result_paths: URL path fragments whose 200 responses are
                returned without envelope unwrapping.
        """
        self._client = client
        self._raw_result_paths = tuple(raw_result_paths)

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: str | bytes | None,
        timeout_ms: int,
    ) -> Any:
        """Perform one exchange and unwrap its result.

        Args:
            method: HTTP method.
            url: Fully built URL.
            headers: Final request headers.
            content: Request body.
            timeout_ms: Time bound for the whole exchange.

        Returns:
            Unwrapped result.

        Raises:
            HttpResponseError: On a status outside 2xx/3xx.
            ApplicationError: If the success body is rejected.
            TimeoutError: If the exchange exceeds ``timeout_ms``.
            httpx.TransportError: On connectivity failures.
        """
        timeout = timeout_ms / 1000.0
        logger.debug(
            "http_request",
            component="fetch",
            method=method,
            url=redact_url_credentials(url),
            headers=redact_headers(headers),
        )
        response = await asyncio.wait_for(
            self._client.request(
                method,
                url,
                headers=headers,
                content=content,
                timeout=timeout,
                follow_redirects=True,
            ),
            timeout=timeout,
        )

        body = parse_body(response)
        status = response.status_code
        reason = response.reason_phrase

        if not HTTP_STATUS_OK_MIN <= status < HTTP_STATUS_REDIRECT_MAX:
            raise HttpResponseError(status, reason, body)

        if status == HTTP_STATUS_OK and self._is_raw_result(response.url.path):
            return body

        return unwrap_result(body, reason, status)

    def _is_raw_result(self, path: str) -> bool:
        return any(fragment in path for fragment in self._raw_result_paths)

"""Redaction utilities for request logging."""

import re
from collections.abc import Mapping
from typing import Any


# Headers and event fields that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "set-cookie",
        "token",
        "x-api-key",
    }
)

REDACTED_VALUE = "[REDACTED]"

_URL_CREDENTIALS = re.compile(r"(https?://)([^:/@]+):([^@]+)@")


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive.

    Args:
        header_name: The header name to check.

    Returns:
        True if the header should be redacted.
    """
    return header_name.lower() in SENSITIVE_HEADERS


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    The TagoIO ``token`` header carries the account or device token and is
    treated like Authorization.

    Args:
        headers: Original headers.

    Returns:
        New dictionary with sensitive values redacted.
    """
    return {
        key: REDACTED_VALUE if is_sensitive_header(key) else value
        for key, value in headers.items()
    }


def redact_url_credentials(url: str) -> str:
    """Redact ``user:password@`` credentials from a URL.

    Args:
        url: URL that may contain credentials.

    Returns:
        URL with credentials redacted.
    """
    return _URL_CREDENTIALS.sub(r"\1[REDACTED]:[REDACTED]@", url)


def redact_event_fields(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor that scrubs sensitive top-level event fields."""
    for key in event_dict:
        if is_sensitive_header(key):
            event_dict[key] = REDACTED_VALUE
    return event_dict

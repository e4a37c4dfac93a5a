"""Request fingerprinting for cache and in-flight keys.

A fingerprint is a signed 32-bit integer derived from the request URL, the
caller identity header, the query parameters, the body and the method. It is
not cryptographic: collisions only cost a cache or dedup slot.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from tagoio_engine.fetch.constants import DEFAULT_IDENTITY_HEADERS
from tagoio_engine.fetch.models import RequestDescriptor


_HASH_MASK = 0xFFFFFFFF
_SIGN_BIT = 0x80000000


def hash_string(text: str) -> int:
    """Reduce a string to a signed 32-bit rolling hash.

    Args:
        text: Input string.

    Returns:
        Hash value; 0 for the empty string.
    """
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & _HASH_MASK
    if value & _SIGN_BIT:
        return value - (1 << 32)
    return value


def identity_of(
    headers: Mapping[str, str],
    identity_headers: Iterable[str] = DEFAULT_IDENTITY_HEADERS,
) -> str | None:
    """Return the caller identity carried in the headers.

    Args:
        headers: Request headers.
        identity_headers: Header names to look for, in priority order.

    Returns:
        Value of the first identity header present, or None.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    for name in identity_headers:
        value = lowered.get(name.lower())
        if value is not None:
            return value
    return None


def fingerprint(
    descriptor: RequestDescriptor,
    identity_headers: Iterable[str] = DEFAULT_IDENTITY_HEADERS,
) -> int:
    """Compute the fingerprint of a request descriptor.

    Args:
        descriptor: Request to fingerprint.
        identity_headers: Header names that identify the caller.

    Returns:
        Signed 32-bit fingerprint.
    """
    key: dict[str, Any] = {
        "url": descriptor.url,
        "token": identity_of(descriptor.headers, identity_headers),
        "params": descriptor.params,
        "body": descriptor.body,
        "method": descriptor.method,
    }
    canonical = json.dumps(key, sort_keys=True, separators=(",", ":"), default=str)
    return hash_string(canonical)

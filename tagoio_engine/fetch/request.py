"""Header, URL and body preparation for outgoing requests."""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from tagoio_engine.fetch.config import HostContext
from tagoio_engine.fetch.models import UNSET, RequestDescriptor


_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    target = name.lower()
    return any(key.lower() == target for key in headers)


def build_headers(
    caller_headers: Mapping[str, str],
    host: HostContext,
    user_agent: str,
) -> dict[str, str]:
    """Merge caller headers with host-dependent defaults.

    Browser hosts get cache-busting headers; every other host gets the
    identification banner as User-Agent. Defaults never replace a header
    the caller already set.

    Args:
        caller_headers: Headers supplied by the caller.
        host: Runtime facts.
        user_agent: User-Agent value for non-browser hosts.

    Returns:
        New headers dictionary.
    """
    headers = dict(caller_headers)

    if host.is_browser:
        defaults = {"Pragma": "no-cache", "Cache-Control": "no-cache"}
    else:
        defaults = {"User-Agent": user_agent}

    for name, value in defaults.items():
        if not _has_header(headers, name):
            headers[name] = value

    return headers


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(prefix: str, value: Any) -> list[tuple[str, str]]:
    if value is UNSET:
        return []
    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, item in value.items():
            pairs.extend(_flatten(f"{prefix}[{key}]", item))
        return pairs
    if isinstance(value, list | tuple):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(_flatten(f"{prefix}[{index}]", item))
        return pairs
    return [(prefix, _scalar(value))]


def encode_query(params: Mapping[str, Any]) -> str:
    """Serialize query parameters using bracket notation.

    Nested mappings become ``key[sub]`` and sequences ``key[0]``. ``None``
    serializes to an empty value and ``UNSET`` is omitted.

    Args:
        params: Query parameters.

    Returns:
        Encoded query string without a leading ``?``.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        pairs.extend(_flatten(str(key), value))
    return "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in pairs)


def build_url(base_url: str, params: Mapping[str, Any] | None) -> str:
    """Append serialized query parameters to a URL.

    Args:
        base_url: URL, possibly with an existing query component.
        params: Query parameters.

    Returns:
        URL with the query appended.
    """
    query = encode_query(params) if params else ""
    if not query:
        return base_url
    if "?" not in base_url:
        return f"{base_url}?{query}"
    if base_url.endswith(("?", "&")):
        return f"{base_url}{query}"
    return f"{base_url}&{query}"


def prepare_body(descriptor: RequestDescriptor) -> str | bytes | None:
    """Serialize the request body.

    Strings and bytes are sent verbatim. Structured bodies are JSON encoded
    and ``Content-Type: application/json`` is added to the descriptor
    headers unless the caller already set one.

    Args:
        descriptor: Request descriptor.

    Returns:
        Body content, or None when nothing is sent.
    """
    body = descriptor.body
    if body is None or descriptor.method in _BODYLESS_METHODS:
        return None
    if isinstance(body, str | bytes):
        return body

    if not _has_header(descriptor.headers, "Content-Type"):
        descriptor.headers["Content-Type"] = "application/json"
    return json.dumps(body)

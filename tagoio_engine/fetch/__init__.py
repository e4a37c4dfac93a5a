"""Request engine for the TagoIO API.

This module provides resilient request execution with:
- Response caching keyed by request fingerprint
- Coalescing of concurrent identical requests
- Bounded retries for timeouts, connectivity failures and 5xx responses
- Unwrapping of the TagoIO ``{status, result}`` response envelope
"""

from tagoio_engine.fetch.cache import CacheEntry, ResponseCache
from tagoio_engine.fetch.classify import Classification, classify_error
from tagoio_engine.fetch.client import ApiRequestEngine, api_request
from tagoio_engine.fetch.config import EngineConfig, HostContext
from tagoio_engine.fetch.errors import (
    ApiRequestError,
    ApplicationError,
    HttpResponseError,
    RequestFailedError,
)
from tagoio_engine.fetch.fingerprint import fingerprint, hash_string
from tagoio_engine.fetch.inflight import InFlightRegistry
from tagoio_engine.fetch.metrics import EngineMetrics
from tagoio_engine.fetch.models import (
    UNSET,
    ClassifiedError,
    ErrorCode,
    ErrorOrigin,
    RequestDescriptor,
)
from tagoio_engine.fetch.redact import redact_headers, redact_url_credentials
from tagoio_engine.fetch.request import build_headers, build_url, encode_query
from tagoio_engine.fetch.transport import HttpTransport, unwrap_result


__all__ = [
    # Engine
    "ApiRequestEngine",
    "api_request",
    # Shared state
    "ResponseCache",
    "CacheEntry",
    "InFlightRegistry",
    # Config
    "EngineConfig",
    "HostContext",
    # Models
    "RequestDescriptor",
    "ClassifiedError",
    "ErrorCode",
    "ErrorOrigin",
    "UNSET",
    # Errors
    "ApiRequestError",
    "ApplicationError",
    "RequestFailedError",
    "HttpResponseError",
    # Building blocks
    "Classification",
    "classify_error",
    "fingerprint",
    "hash_string",
    "build_headers",
    "build_url",
    "encode_query",
    "HttpTransport",
    "unwrap_result",
    # Metrics
    "EngineMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]

"""Base building blocks for TagoIO resource modules."""

from tagoio_engine.modules.base import ApiModule, mount_request
from tagoio_engine.modules.regions import (
    REGION_API_URLS,
    resolve_api_url,
    set_runtime_region,
)


__all__ = [
    "ApiModule",
    "mount_request",
    "REGION_API_URLS",
    "resolve_api_url",
    "set_runtime_region",
]

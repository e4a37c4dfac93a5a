"""TagoIO region resolution."""

from collections.abc import Mapping

from tagoio_engine.settings import EngineSettings


DEFAULT_REGION = "us-e1"

REGION_API_URLS: dict[str, str] = {
    "us-e1": "https://api.tago.io",
    "eu-w1": "https://api.eu-w1.tago.io",
}

# Legacy names still accepted by the API
REGION_ALIASES: dict[str, str] = {"usa-1": "us-e1"}

Region = str | Mapping[str, str]

_runtime_region: Mapping[str, str] | None = None


def set_runtime_region(region: Mapping[str, str] | None) -> None:
    """Set the in-memory region inherited by modules created without one.

    Args:
        region: Mapping with at least an ``api`` URL, or None to unset.
    """
    global _runtime_region
    _runtime_region = region


def resolve_api_url(region: Region | None = None, settings: EngineSettings | None = None) -> str:
    """Return the API base URL for a region.

    Resolution order: a named or custom region, the runtime region, the
    ``TAGOIO_API`` environment variable, then ``us-e1``.

    Args:
        region: Region name, ``"env"``, or a mapping with an ``api`` key.
        settings: Environment settings; loaded when needed and omitted.

    Returns:
        API base URL without a trailing slash.

    Raises:
        ValueError: If the region name is unknown or a mapping lacks ``api``.
    """
    if isinstance(region, Mapping):
        api = region.get("api")
        if not api:
            msg = "Custom region must define an 'api' URL"
            raise ValueError(msg)
        return api.rstrip("/")

    if isinstance(region, str) and region != "env":
        name = REGION_ALIASES.get(region, region)
        if name not in REGION_API_URLS:
            msg = f"Invalid region {region!r}"
            raise ValueError(msg)
        return REGION_API_URLS[name]

    if _runtime_region is not None:
        return resolve_api_url(_runtime_region)

    settings = settings or EngineSettings()
    if settings.api_url:
        return settings.api_url.rstrip("/")
    return REGION_API_URLS[DEFAULT_REGION]

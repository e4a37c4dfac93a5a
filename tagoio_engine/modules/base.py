"""Base class for TagoIO resource modules.

Resource modules (devices, accounts, dictionaries, ...) only assemble request
descriptors; execution is delegated to the request engine.
"""

from collections.abc import Mapping
from typing import Any

from tagoio_engine.fetch.client import ApiRequestEngine
from tagoio_engine.fetch.models import RequestDescriptor
from tagoio_engine.modules.regions import Region, resolve_api_url


def mount_request(
    api_url: str,
    path: str,
    method: str = "GET",
    body: Any = None,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout_ms: int | None = None,
) -> RequestDescriptor:
    """Build a request descriptor for an API path.

    Args:
        api_url: API base URL.
        path: Path starting with ``/``.
        method: HTTP method.
        body: Request body.
        params: Query parameters.
        headers: Request headers.
        timeout_ms: Per-call timeout override.

    Returns:
        Request descriptor.
    """
    return RequestDescriptor(
        url=f"{api_url}{path}",
        method=method,
        body=body,
        params=dict(params or {}),
        headers=dict(headers or {}),
        timeout_ms=timeout_ms,
    )


class ApiModule:
    """Token-authenticated access to one TagoIO resource family."""

    def __init__(
        self,
        token: str,
        region: Region | None = None,
        engine: ApiRequestEngine | None = None,
    ) -> None:
        """Initialize the module.

        Args:
            token: Account, profile, device or analysis token.
            region: Region name or custom region mapping.
            engine: Request engine; the process-wide one when omitted.

        Raises:
            ValueError: If the token is missing.
        """
        if not token:
            msg = "Invalid Token"
            raise ValueError(msg)
        self._token = token
        self._region = region
        self._engine = engine

    @property
    def engine(self) -> ApiRequestEngine:
        """Engine executing this module's requests."""
        return self._engine or ApiRequestEngine.get_instance()

    async def do_request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        cache_ttl_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        """Execute a request authenticated with the module token.

        Caller headers take precedence over the ``token`` header.

        Returns:
            The unwrapped API result.
        """
        descriptor = mount_request(
            resolve_api_url(self._region),
            path,
            method=method,
            body=body,
            params=params,
            headers={"token": self._token, **(headers or {})},
            timeout_ms=timeout_ms,
        )
        return await self.engine.request(descriptor, cache_ttl_ms)

    @classmethod
    async def do_request_anonymous(
        cls,
        path: str,
        method: str = "GET",
        body: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        cache_ttl_ms: int | None = None,
        region: Region | None = None,
        engine: ApiRequestEngine | None = None,
    ) -> Any:
        """Execute a request without a token (login, password recovery, ...)."""
        descriptor = mount_request(
            resolve_api_url(region),
            path,
            method=method,
            body=body,
            params=params,
            headers=headers,
        )
        engine = engine or ApiRequestEngine.get_instance()
        return await engine.request(descriptor, cache_ttl_ms)

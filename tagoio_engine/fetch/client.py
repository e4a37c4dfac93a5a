"""Request engine with caching, in-flight deduplication and retries."""

import asyncio
import time
from typing import Any, ClassVar

import httpx
import structlog

from tagoio_engine.fetch.cache import CacheEntry, ResponseCache
from tagoio_engine.fetch.classify import classify_error
from tagoio_engine.fetch.config import EngineConfig, HostContext
from tagoio_engine.fetch.errors import ApplicationError, RequestFailedError
from tagoio_engine.fetch.fingerprint import fingerprint
from tagoio_engine.fetch.inflight import InFlightRegistry
from tagoio_engine.fetch.metrics import EngineMetrics
from tagoio_engine.fetch.models import RequestDescriptor
from tagoio_engine.fetch.redact import redact_url_credentials
from tagoio_engine.fetch.request import build_headers, build_url, prepare_body
from tagoio_engine.fetch.transport import HttpTransport
from tagoio_engine.settings import EngineSettings


logger = structlog.get_logger()


class ApiRequestEngine:
    """Executes TagoIO API requests.

    Provides:
    - Response caching keyed by request fingerprint
    - Coalescing of concurrent identical cached requests
    - Bounded retries with a fixed delay for timeouts, connectivity and 5xx
    - Immediate surfacing of API rejections (4xx, ``status: false``)

    Callers get the unwrapped ``result`` or one of two exceptions:
    RequestFailedError (classified record) or ApplicationError (the API's
    own payload).
    """

    _instance: ClassVar["ApiRequestEngine | None"] = None

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        cache: ResponseCache | None = None,
        inflight: InFlightRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
        host: HostContext | None = None,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration.
            cache: Response cache; a private one is created when omitted.
            inflight: In-flight registry; a private one is created when omitted.
            http_client: Async HTTP client; the engine creates and owns one
                when omitted.
            host: Runtime facts for default headers; detected when omitted.
            metrics: Metrics sink.
        """
        self._config = config or EngineConfig()
        self._cache = cache if cache is not None else ResponseCache()
        self._inflight = inflight if inflight is not None else InFlightRegistry()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self._host = host or HostContext.detect()
        self._metrics = metrics or EngineMetrics()
        self._transport = HttpTransport(self._http, self._config.raw_result_paths)
        self._user_agent = self._host.user_agent(self._config)
        self._log = logger.bind(component="fetch")

    @classmethod
    def get_instance(cls) -> "ApiRequestEngine":
        """Get the process-wide engine, configured from the environment."""
        if cls._instance is None:
            settings = EngineSettings()
            cls._instance = cls(
                EngineConfig.from_settings(settings),
                host=HostContext.detect(settings),
            )
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide engine (primarily for testing)."""
        cls._instance = None

    @property
    def config(self) -> EngineConfig:
        """Engine configuration."""
        return self._config

    @property
    def cache(self) -> ResponseCache:
        """Response cache."""
        return self._cache

    @property
    def inflight(self) -> InFlightRegistry:
        """In-flight registry."""
        return self._inflight

    @property
    def metrics(self) -> EngineMetrics:
        """Engine metrics."""
        return self._metrics

    def clear_cache(self) -> None:
        """Remove every cached response."""
        self._cache.clear()

    async def aclose(self) -> None:
        """Close the HTTP client if the engine created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ApiRequestEngine":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def request(
        self,
        descriptor: RequestDescriptor,
        cache_ttl_ms: int | None = None,
    ) -> Any:
        """Execute a request with caching, deduplication and retries.

        Args:
            descriptor: Request to execute.
            cache_ttl_ms: Cache the result for this many milliseconds.
                Falsy values disable caching and deduplication.

        Returns:
            The unwrapped ``result`` of the API response.

        Raises:
            ApplicationError: The API rejected the request.
            RequestFailedError: Every attempt failed.
        """
        start_time_ns = time.perf_counter_ns()
        key = fingerprint(descriptor, self._config.identity_headers)
        log = self._log.bind(
            method=descriptor.method,
            url=redact_url_credentials(descriptor.url),
            fingerprint=key,
        )
        self._metrics.record_request()

        use_cache = bool(cache_ttl_ms)
        if use_cache:
            entry = await self._await_cached(key, log)
            if entry is not None:
                self._metrics.record_cache_hit()
                log.debug("cache_hit")
                return entry.value
            self._inflight.add(key)

        try:
            result = await self._execute_with_retry(descriptor, log)
            if use_cache:
                self._cache.set(key, result, cache_ttl_ms)  # type: ignore[arg-type]
        finally:
            if use_cache:
                self._inflight.remove(key)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        log.info("request_complete", cached=use_cache, duration_ms=round(duration_ms, 2))
        return result

    async def _await_cached(
        self,
        key: int,
        log: structlog.stdlib.BoundLogger,
    ) -> CacheEntry | None:
        """Wait out identical in-flight requests, then consult the cache.

        Args:
            key: Request fingerprint.
            log: Bound logger.

        Returns:
            Live cache entry, or None on a miss.
        """
        poll_seconds = self._config.dedup_poll_ms / 1000.0
        while self._inflight.has(key):
            self._metrics.record_dedup_wait()
            log.debug("dedup_wait")
            await self._inflight.wait(key, timeout=poll_seconds)
        return self._cache.lookup(key)

    async def _execute_with_retry(
        self,
        descriptor: RequestDescriptor,
        log: structlog.stdlib.BoundLogger,
    ) -> Any:
        """Run the attempt loop.

        Args:
            descriptor: Request to execute.
            log: Bound logger.

        Returns:
            Unwrapped result of the first successful attempt.
        """
        content = prepare_body(descriptor)
        url = build_url(descriptor.url, descriptor.params)
        headers = build_headers(descriptor.headers, self._host, self._user_agent)
        timeout_ms = descriptor.timeout_ms or self._config.request_timeout_ms
        attempts = self._config.request_attempts
        delay_seconds = self._config.retry_delay_ms / 1000.0
        last_error: RequestFailedError | None = None
        last_cause: BaseException | None = None

        for attempt in range(1, attempts + 1):
            self._metrics.record_attempt()
            try:
                return await self._transport.send(
                    descriptor.method, url, headers, content, timeout_ms
                )
            except ApplicationError as e:
                self._metrics.record_application_error()
                log.info("request_rejected", attempt=attempt, status=e.status_code)
                raise
            except Exception as e:  # noqa: BLE001
                classification = classify_error(e, descriptor.url, descriptor.method)
                if classification.application_error is not None:
                    self._metrics.record_application_error()
                    log.info(
                        "request_rejected",
                        attempt=attempt,
                        status=classification.error.status,
                    )
                    raise classification.application_error from e

                last_error = RequestFailedError(classification.error)
                last_cause = e
                log.warning(
                    "attempt_failed",
                    attempt=attempt,
                    max_attempts=attempts,
                    code=classification.error.code.value,
                    status=classification.error.status,
                    status_text=classification.error.status_text,
                )

            if attempt < attempts:
                self._metrics.record_retry()
                log.debug(
                    "retry_attempt",
                    attempt=attempt + 1,
                    delay_ms=self._config.retry_delay_ms,
                )
                await asyncio.sleep(delay_seconds)

        if last_error is None:
            msg = f"request_attempts must be at least 1, got {attempts}"
            raise RuntimeError(msg)

        self._metrics.record_failure(last_error.error.code)
        log.error(
            "request_failed",
            code=last_error.error.code.value,
            status=last_error.error.status,
            status_text=last_error.error.status_text,
        )
        raise last_error from last_cause


async def api_request(
    descriptor: RequestDescriptor,
    cache_ttl_ms: int | None = None,
) -> Any:
    """Execute a request on the process-wide engine.

    Args:
        descriptor: Request to execute.
        cache_ttl_ms: Optional cache time to live in milliseconds.

    Returns:
        The unwrapped API result.
    """
    return await ApiRequestEngine.get_instance().request(descriptor, cache_ttl_ms)

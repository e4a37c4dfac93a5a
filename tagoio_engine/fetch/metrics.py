"""Metrics collection for the request engine."""

from dataclasses import dataclass, field

from tagoio_engine.fetch.models import ErrorCode


@dataclass
class EngineMetrics:
    """Counters for one engine instance.

    Tracks logical requests, transport attempts, retries, cache hits,
    dedup waits and final failures.
    """

    requests_total: int = 0
    attempts_total: int = 0
    retries_total: int = 0
    cache_hits_total: int = 0
    dedup_waits_total: int = 0
    application_errors_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)

    def record_request(self) -> None:
        """Record a logical request entering the engine."""
        self.requests_total += 1

    def record_attempt(self) -> None:
        """Record one transport attempt."""
        self.attempts_total += 1

    def record_retry(self) -> None:
        """Record a retry after a failed attempt."""
        self.retries_total += 1

    def record_cache_hit(self) -> None:
        """Record a request answered from the cache."""
        self.cache_hits_total += 1

    def record_dedup_wait(self) -> None:
        """Record one wait on an identical in-flight request."""
        self.dedup_waits_total += 1

    def record_application_error(self) -> None:
        """Record a request rejected by the API."""
        self.application_errors_total += 1

    def record_failure(self, code: ErrorCode) -> None:
        """Record a request that exhausted its attempts.

        Args:
            code: Classification of the last failure.
        """
        key = code.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def to_dict(self) -> dict[str, int | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_total": self.requests_total,
            "attempts_total": self.attempts_total,
            "retries_total": self.retries_total,
            "cache_hits_total": self.cache_hits_total,
            "dedup_waits_total": self.dedup_waits_total,
            "application_errors_total": self.application_errors_total,
            "failures_total": dict(self.failures_total),
        }

"""Configuration models for the request engine."""

import platform
import sys
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tagoio_engine.fetch.constants import (
    DEFAULT_DEDUP_POLL_MS,
    DEFAULT_IDENTITY_HEADERS,
    DEFAULT_PRODUCT_NAME,
    DEFAULT_RAW_RESULT_PATHS,
    DEFAULT_REQUEST_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_RETRY_DELAY_MS,
    SDK_VERSION,
    VENDOR_ANALYSIS_CONTEXT,
)
from tagoio_engine.settings import EngineSettings


class EngineConfig(BaseModel):
    """Configuration for the request engine.

    Central configuration for timeouts, retry budget, dedup polling and the
    identification banner.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_timeout_ms: Annotated[int, Field(gt=0, le=600_000)] = (
        DEFAULT_REQUEST_TIMEOUT_MS
    )
    request_attempts: Annotated[int, Field(ge=1, le=20)] = DEFAULT_REQUEST_ATTEMPTS
    retry_delay_ms: Annotated[int, Field(ge=0, le=60_000)] = DEFAULT_RETRY_DELAY_MS
    dedup_poll_ms: Annotated[int, Field(gt=0, le=10_000)] = DEFAULT_DEDUP_POLL_MS
    product_name: Annotated[str, Field(min_length=1, max_length=100)] = (
        DEFAULT_PRODUCT_NAME
    )
    sdk_version: Annotated[str, Field(min_length=1)] = SDK_VERSION
    identity_headers: tuple[str, ...] = DEFAULT_IDENTITY_HEADERS
    raw_result_paths: tuple[str, ...] = DEFAULT_RAW_RESULT_PATHS

    @model_validator(mode="after")
    def validate_delays(self) -> "EngineConfig":
        """Ensure retry backoff is longer than the dedup poll."""
        if self.retry_delay_ms and self.retry_delay_ms <= self.dedup_poll_ms:
            msg = (
                f"retry_delay_ms ({self.retry_delay_ms}) must be longer than "
                f"dedup_poll_ms ({self.dedup_poll_ms})"
            )
            raise ValueError(msg)
        return self

    @classmethod
    def from_settings(cls, settings: EngineSettings, **overrides: object) -> "EngineConfig":
        """Build a config with environment overrides applied.

        Args:
            settings: Environment settings.
            **overrides: Explicit field values, applied last.

        Returns:
            Engine configuration.
        """
        values: dict[str, object] = {}
        if settings.request_attempts is not None:
            values["request_attempts"] = settings.request_attempts
        if settings.request_timeout_ms is not None:
            values["request_timeout_ms"] = settings.request_timeout_ms
        values.update(overrides)
        return cls.model_validate(values)

    @property
    def request_timeout_seconds(self) -> float:
        """Default attempt timeout in seconds."""
        return self.request_timeout_ms / 1000.0


class HostContext(BaseModel):
    """Facts about the runtime that shape default headers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_browser: bool = False
    running_at_vendor: bool = False
    runtime_version: str = Field(default_factory=platform.python_version)
    system: str = Field(default_factory=lambda: sys.platform)
    arch: str = Field(default_factory=platform.machine)

    @classmethod
    def detect(cls, settings: EngineSettings | None = None) -> "HostContext":
        """Inspect the current interpreter.

        Pyodide and other WebAssembly builds report ``emscripten`` as their
        platform and run inside a browser.

        Args:
            settings: Environment settings; loaded when omitted.

        Returns:
            Host context for this process.
        """
        settings = settings or EngineSettings()
        return cls(
            is_browser=sys.platform == "emscripten",
            running_at_vendor=settings.analysis_context == VENDOR_ANALYSIS_CONTEXT,
        )

    def banner(self) -> str:
        """Return the parenthesized runtime banner for the User-Agent."""
        if self.running_at_vendor:
            return "(Running at TagoIO)"
        return f"(External; Python/{self.runtime_version} {self.system}/{self.arch})"

    def user_agent(self, config: EngineConfig) -> str:
        """Compose the full User-Agent value.

        Args:
            config: Engine configuration holding product name and version.

        Returns:
            User-Agent header value.
        """
        return f"{config.product_name}|{config.sdk_version} {self.banner()}"

"""Engine settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Environment configuration consumed by the request engine."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    request_attempts: Annotated[int, Field(ge=1, le=20)] | None = Field(
        default=None, validation_alias="TAGOIO_REQUEST_ATTEMPTS"
    )
    request_timeout_ms: Annotated[int, Field(gt=0)] | None = Field(
        default=None, validation_alias="TAGOIO_REQUEST_TIMEOUT"
    )
    analysis_context: str | None = Field(
        default=None, validation_alias="T_ANALYSIS_CONTEXT"
    )
    api_url: str | None = Field(default=None, validation_alias="TAGOIO_API")


def get_settings() -> EngineSettings:
    """Get a settings instance."""
    return EngineSettings()

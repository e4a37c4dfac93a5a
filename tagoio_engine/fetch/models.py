"""Data models for the request engine."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Unset:
    """Marker for query parameters that must be left out of the URL."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class ErrorOrigin(str, Enum):
    """Where a classified failure happened.

    - CLIENT_REQUEST: failed before or without a full HTTP exchange
    - SERVER_RESPONSE: a complete HTTP exchange returned an error status
    """

    CLIENT_REQUEST = "CLIENT_REQUEST"
    SERVER_RESPONSE = "SERVER_RESPONSE"


class ErrorCode(str, Enum):
    """Closed taxonomy of classified failures.

    - TIMEOUT: the attempt exceeded its time bound
    - NETWORK_ERROR: connectivity failure
    - HTTP_ERROR: the server answered with an error status
    - UNKNOWN: anything else
    """

    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNKNOWN = "UNKNOWN"


class RequestDescriptor(BaseModel):
    """Description of one HTTP call handed to the engine.

    The model is frozen. The only mutation the engine performs is adding a
    ``Content-Type`` entry to ``headers`` when a structured body is
    serialized to JSON.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1, description="Target URL")]
    method: str = Field(default="GET", description="HTTP method")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Caller-supplied headers"
    )
    params: dict[str, Any] = Field(
        default_factory=dict, description="Query parameters, nesting allowed"
    )
    body: Any = Field(default=None, description="Raw string or structured body")
    timeout_ms: Annotated[int, Field(gt=0)] | None = Field(
        default=None, description="Per-call timeout override"
    )

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the HTTP method."""
        method = v.strip().upper()
        if not method:
            msg = "HTTP method must not be empty"
            raise ValueError(msg)
        return method


class ClassifiedError(BaseModel):
    """Engine failure record produced once per failed attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    origin: ErrorOrigin = Field(alias="from")
    url: str
    method: str
    status: int = Field(description="HTTP status, -1 for client-side failures")
    code: ErrorCode
    status_text: str = Field(alias="statusText")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire-compatible record.

        Returns:
            Dictionary with keys from, url, method, status, code, statusText.
        """
        return self.model_dump(mode="json", by_alias=True)

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..core.error import ParameterError

# One search hit. Keys differ per backend, so no fixed schema is imposed.
Record = Dict[str, Any]

AUTH_EMAIL_KEY = "email_key"
AUTH_API_KEY = "api_key"


class AssetType(IntEnum):
    """Hunter ``is_web`` filter values."""
    WEB = 1
    NON_WEB = 2
    ALL = 3


@dataclass(frozen=True)
class BackendDescriptor:
    id: str
    base_url: str
    auth_scheme: str
    credentials: Mapping[str, str] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class TimeRange:
    start: Optional[str] = None
    end: Optional[str] = None

    def is_unbounded(self) -> bool:
        return not self.start and not self.end


@dataclass(frozen=True)
class QueryRequest:
    raw_query: str
    page: int = 1
    size: int = 1
    fields: Optional[Tuple[str, ...]] = None
    time_range: Optional[TimeRange] = None
    asset_type: Optional[AssetType] = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ParameterError(f"page must be >= 1, got {self.page}")
        if self.size < 1:
            raise ParameterError(f"size must be >= 1, got {self.size}")


@dataclass(frozen=True)
class BackendErrorInfo:
    code: Any
    message: str


@dataclass(frozen=True)
class SearchResponse:
    total_count: int
    records: Tuple[Record, ...] = ()
    backend_error: Optional[BackendErrorInfo] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.backend_error is None


def build_response(
    *,
    total_count: Any,
    records: Sequence[Record],
    backend_error: Optional[BackendErrorInfo] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> SearchResponse:
    try:
        total = int(total_count or 0)
    except (TypeError, ValueError):
        total = 0
    return SearchResponse(
        total_count=max(total, 0),
        records=tuple(records),
        backend_error=backend_error,
        extra=dict(extra or {}),
    )


def build_error_response(code: Any, message: str, extra: Optional[Mapping[str, Any]] = None) -> SearchResponse:
    return build_response(
        total_count=0,
        records=[],
        backend_error=BackendErrorInfo(code=code, message=message or ""),
        extra=extra,
    )

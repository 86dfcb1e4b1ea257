"""Models module: data schemas shared by retrievers, dispatcher and formatter."""
from .schema import (
    AUTH_API_KEY,
    AUTH_EMAIL_KEY,
    AssetType,
    BackendDescriptor,
    BackendErrorInfo,
    QueryRequest,
    Record,
    SearchResponse,
    TimeRange,
    build_error_response,
    build_response,
)

__all__ = [
    "AUTH_API_KEY",
    "AUTH_EMAIL_KEY",
    "AssetType",
    "BackendDescriptor",
    "BackendErrorInfo",
    "QueryRequest",
    "Record",
    "SearchResponse",
    "TimeRange",
    "build_error_response",
    "build_response",
]

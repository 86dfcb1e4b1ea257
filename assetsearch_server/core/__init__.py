"""Core module: errors and logging. Configuration and dispatch live in
``core.config`` and ``core.dispatcher``."""
from .error import (
    AssetSearchError,
    BackendError,
    ConfigError,
    DecodeError,
    ErrorType,
    ParameterError,
    TransportError,
    UnknownToolError,
    log_error,
)
from .logger import bind_library_loggers, setup_logger

__all__ = [
    # Error handling
    "AssetSearchError",
    "BackendError",
    "ConfigError",
    "DecodeError",
    "ErrorType",
    "ParameterError",
    "TransportError",
    "UnknownToolError",
    "log_error",
    # Logging
    "bind_library_loggers",
    "setup_logger",
]

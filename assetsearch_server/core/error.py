"""
Error management module.
"""
import logging
import traceback
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(Enum):
    """Error classification types."""
    CONFIG_ERROR = "config_error"
    INVALID_PARAMS = "invalid_params"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"
    BACKEND_ERROR = "backend_error"
    UNKNOWN_TOOL = "unknown_tool"
    UNKNOWN = "unknown"


class AssetSearchError(Exception):
    """Base exception for AssetSearch errors."""

    error_type = ErrorType.UNKNOWN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(AssetSearchError):
    """Missing or invalid startup configuration. Fatal."""
    error_type = ErrorType.CONFIG_ERROR


class ParameterError(AssetSearchError):
    """Tool arguments that cannot be turned into a query request."""
    error_type = ErrorType.INVALID_PARAMS


class TransportError(AssetSearchError):
    """Connection refused, DNS failure, timeout."""
    error_type = ErrorType.TRANSPORT_ERROR


class DecodeError(AssetSearchError):
    """Non-2xx status or a body that is not the expected JSON envelope."""
    error_type = ErrorType.DECODE_ERROR


class BackendError(AssetSearchError):
    """
    The remote service reported a logical failure.

    The message is the remote one, passed through unmodified.
    """
    error_type = ErrorType.BACKEND_ERROR

    def __init__(self, code: Any, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        info = super().to_dict()
        info["code"] = self.code
        return info


class UnknownToolError(AssetSearchError):
    """Dispatch received a tool name with no registered retriever."""
    error_type = ErrorType.UNKNOWN_TOOL

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", {"tool": name})
        self.name = name


def log_error(
    error: Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    level: str = "ERROR",
) -> Dict[str, Any]:
    """Log ``error`` under its taxonomy tag and return the logged info."""
    logger = logger or logging.getLogger("assetsearch")

    if isinstance(error, AssetSearchError):
        error_info = error.to_dict()
    else:
        error_info = {"error_type": ErrorType.UNKNOWN.value, "message": str(error), "details": {}}
    error_info["error_class"] = type(error).__name__
    error_info["context"] = context or {}

    log_method = getattr(logger, level.lower(), logger.error)
    log_method(
        "[%s] %s: %s",
        error_info["error_type"],
        error_info["error_class"],
        error_info["message"],
        extra={"error_info": error_info},
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Traceback:\n%s", traceback.format_exc())

    return error_info

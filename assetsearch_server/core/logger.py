"""
Logging management module.

The console handler writes to stderr: with the stdio transport, stdout
carries the MCP frames.
"""
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

# Library loggers that should share the server's handlers.
BOUND_LOGGERS = ("dp", "dp.agent", "dp.agent.server", "mcp", "mcp.server")


def setup_logger(
    name: str = "assetsearch",
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Configure the server logger: stderr console plus an optional log file."""
    logger = logging.getLogger(name)
    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def bind_library_loggers(logger: logging.Logger, names: Iterable[str] = BOUND_LOGGERS) -> None:
    """
    Route dp/mcp internal logs through the handlers of ``logger`` so tool-call
    logs land in the same place as ours.
    """
    for name in names:
        lib_logger = logging.getLogger(name)
        lib_logger.setLevel(logger.level)
        lib_logger.handlers.clear()
        for handler in logger.handlers:
            lib_logger.addHandler(handler)
        lib_logger.propagate = False

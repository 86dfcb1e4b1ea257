"""AssetSearch Server - FOFA and Hunter asset search exposed as MCP tools."""
from .core.config import ServerConfig, load_server_config
from .core.dispatcher import ToolDispatcher, ToolResponse, build_dispatcher
from .search.params import FOFA_TOOL, HUNTER_TOOL

__all__ = [
    "FOFA_TOOL",
    "HUNTER_TOOL",
    "ServerConfig",
    "ToolDispatcher",
    "ToolResponse",
    "build_dispatcher",
    "load_server_config",
]

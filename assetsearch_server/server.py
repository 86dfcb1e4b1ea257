import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

from anyio import CapacityLimiter, to_thread
from dotenv import load_dotenv
from dp.agent.server import CalculationMCPServer
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field


def _load_env() -> None:
    """
    Load environment variables from the project root `.env`, falling back
    to the current working directory.
    """
    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        return

    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(cwd_env)


_load_env()

from .core.config import ALL_BACKENDS, get_log_dir, load_server_config, parse_backend_names
from .core.dispatcher import ToolDispatcher, build_dispatcher
from .core.error import ConfigError
from .core.logger import bind_library_loggers, setup_logger
from .search.params import (
    FOFA_FIELDS_HELP,
    FOFA_QUERY_HELP,
    FOFA_TOOL,
    HUNTER_QUERY_HELP,
    HUNTER_TOOL,
)

logger = logging.getLogger("assetsearch")

# One backend call at a time over the single channel.
_limiter: Optional[CapacityLimiter] = None

_ENV_MASK_KEYS = frozenset({"FOFA_KEY", "HUNTER_API_KEY"})


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="AssetSearch MCP Server (FOFA / Hunter)")
    parser.add_argument("--fofa-email", default=None, help="FOFA API email (default: $FOFA_EMAIL)")
    parser.add_argument("--fofa-key", default=None, help="FOFA API key (default: $FOFA_KEY)")
    parser.add_argument("--hunter-key", default=None, help="Hunter API key (default: $HUNTER_API_KEY)")
    parser.add_argument(
        "--backends",
        default=",".join(ALL_BACKENDS),
        help=f"Comma separated backends to serve (default: {','.join(ALL_BACKENDS)})",
    )
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "sse", "streamable-http"],
        help="MCP transport (default: stdio)",
    )
    parser.add_argument("--port", type=int, default=50002, help="Server port for HTTP transports (default: 50002)")
    parser.add_argument("--host", default="127.0.0.1", help="Server host for HTTP transports (default: 127.0.0.1)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (default: ASSET_SEARCH_LOG_DIR/assetsearch_<date>.log)",
    )
    return parser.parse_args(argv)


def print_startup_env() -> None:
    """
    Print relevant environment variables to stderr at server startup.
    Masks credentials.
    """
    keys = [
        "FOFA_EMAIL", "FOFA_KEY", "FOFA_BASE_URL",
        "HUNTER_API_KEY", "HUNTER_BASE_URL",
        "ASSET_SEARCH_HTTP_TIMEOUT", "ASSET_SEARCH_LOG_DIR",
    ]
    print("=== AssetSearch server env ===", file=sys.stderr)
    for k in keys:
        v = os.getenv(k)
        if v is None or v == "":
            print(f"  {k}= (unset)", file=sys.stderr)
        elif k in _ENV_MASK_KEYS:
            print(f"  {k}= *** (set)", file=sys.stderr)
        else:
            print(f"  {k}= {v}", file=sys.stderr)
    print("==============================", file=sys.stderr)


async def _call(dispatcher: ToolDispatcher, name: str, arguments: Dict[str, Any]) -> str:
    """
    Run one dispatch off the event loop, one at a time.

    Error frames are raised as ``ToolError`` carrying the dispatcher message
    as is. FastMCP reports them as ``isError`` results and prefixes the text
    with "Error executing tool <name>: ", so MCP clients see the backend
    message after that prefix.
    """
    global _limiter
    if _limiter is None:
        _limiter = CapacityLimiter(1)
    frame = await to_thread.run_sync(dispatcher.handle, name, arguments, limiter=_limiter)
    if frame.is_error:
        raise ToolError(frame.text)
    return frame.text


def register_tools(mcp: CalculationMCPServer, dispatcher: ToolDispatcher) -> None:
    """Expose one MCP tool per configured backend."""
    names = dispatcher.tool_names

    if FOFA_TOOL.name in names:
        @mcp.tool()
        async def fofa_search(
            query: Annotated[str, Field(description=FOFA_QUERY_HELP)],
            page: Annotated[int, Field(description="页码，默认为1")] = 1,
            size: Annotated[int, Field(description="每页数量，默认为50")] = 50,
            fields: Annotated[str, Field(description=FOFA_FIELDS_HELP)] = "",
        ) -> str:
            """FOFA搜索引擎"""
            return await _call(
                dispatcher,
                FOFA_TOOL.name,
                {"query": query, "page": page, "size": size, "fields": fields},
            )

    if HUNTER_TOOL.name in names:
        @mcp.tool()
        async def hunter_search(
            query: Annotated[str, Field(description=HUNTER_QUERY_HELP)],
            page: Annotated[int, Field(description="页码，默认为1")] = 1,
            size: Annotated[int, Field(description="每页数量，默认为20")] = 20,
            is_web: Annotated[int, Field(description="资产类型: 1(web资产), 2(非web资产), 3(全部)")] = 1,
            start_time: Annotated[str, Field(description="开始时间，格式为YYYY-MM-DD")] = "",
            end_time: Annotated[str, Field(description="结束时间，格式为YYYY-MM-DD")] = "",
        ) -> str:
            """Hunter搜索引擎"""
            return await _call(
                dispatcher,
                HUNTER_TOOL.name,
                {
                    "query": query,
                    "page": page,
                    "size": size,
                    "is_web": is_web,
                    "start_time": start_time,
                    "end_time": end_time,
                },
            )


def main(argv=None) -> None:
    args = parse_args(argv)

    if args.log_file is None:
        date_tag = datetime.now().strftime("%Y%m%d")
        log_file = get_log_dir() / f"assetsearch_{date_tag}.log"
    else:
        log_file = Path(args.log_file)
    setup_logger(name="assetsearch", level=args.log_level, log_file=log_file)
    bind_library_loggers(logger)

    try:
        config = load_server_config(
            backends=parse_backend_names(args.backends),
            fofa_email=args.fofa_email,
            fofa_key=args.fofa_key,
            hunter_key=args.hunter_key,
        )
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    dispatcher = build_dispatcher(config)
    mcp = CalculationMCPServer("AssetSearchServer", port=args.port, host=args.host)
    register_tools(mcp, dispatcher)

    print_startup_env()
    logger.info(
        "Starting AssetSearch MCP Server: tools=%s, transport=%s, timeout=%ss",
        dispatcher.tool_names,
        args.transport,
        config.http_timeout,
    )
    mcp.run(transport=args.transport)


if __name__ == "__main__":
    main()

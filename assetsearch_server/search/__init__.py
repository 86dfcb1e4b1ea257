"""Search module: tool parameters, defaulting and report formatting."""
from .formatter import (
    format_fofa_report,
    format_hunter_report,
    format_report,
    render_fofa_record,
    render_hunter_record,
)
from .params import (
    FOFA_TOOL,
    HUNTER_TOOL,
    ParamSpec,
    ToolSpec,
    apply_defaults,
    build_query_request,
)

__all__ = [
    "FOFA_TOOL",
    "HUNTER_TOOL",
    "ParamSpec",
    "ToolSpec",
    "apply_defaults",
    "build_query_request",
    "format_report",
    "format_fofa_report",
    "format_hunter_report",
    "render_fofa_record",
    "render_hunter_record",
]

"""
Text reports for tool responses.

Everything here is pure: same response in, same text out, records in the
order the backend returned them.
"""
from typing import Any, Callable, List

from ..models.schema import Record, SearchResponse

REPORT_HEADER = "搜索结果(共{count}条):"
FIELD_SEPARATOR = " | "

# (record key, label) pairs rendered for Hunter hits.
HUNTER_COLUMNS = (
    ("ip", "IP"),
    ("port", "端口"),
    ("web_title", "标题"),
)

RecordRenderer = Callable[[Record], str]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def render_fofa_record(record: Record) -> str:
    return FIELD_SEPARATOR.join(_text(v) for v in record.values())


def render_hunter_record(record: Record) -> str:
    return FIELD_SEPARATOR.join(f"{label}: {_text(record.get(key))}" for key, label in HUNTER_COLUMNS)


def format_report(response: SearchResponse, render_line: RecordRenderer) -> str:
    lines: List[str] = [REPORT_HEADER.format(count=response.total_count)]
    lines.extend(render_line(record) for record in response.records)
    return "\n".join(lines) + "\n"


def format_fofa_report(response: SearchResponse) -> str:
    return format_report(response, render_fofa_record)


def format_hunter_report(response: SearchResponse) -> str:
    return format_report(response, render_hunter_record)

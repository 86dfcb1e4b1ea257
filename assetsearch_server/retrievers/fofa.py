import base64
from typing import Any, Dict, List, Optional, Sequence

from .base import BaseRetriever
from ..models.schema import QueryRequest, Record, SearchResponse, build_error_response, build_response


def encode_fofa_query(raw_query: str) -> str:
    """FOFA expects ``qbase64``: standard base64 of the UTF-8 query."""
    return base64.b64encode(raw_query.encode("utf-8")).decode("ascii")


def _row_to_record(row: Any, fields: Optional[Sequence[str]]) -> Record:
    """
    FOFA rows are positional. Key them by the requested field names; a
    single requested field comes back as a bare scalar instead of a list.
    """
    if not isinstance(row, (list, tuple)):
        row = [row]
    record: Record = {}
    for i, value in enumerate(row):
        if fields and i < len(fields):
            key = fields[i]
        else:
            key = f"field_{i}"
        record[key] = "" if value is None else str(value)
    return record


class FofaRetriever(BaseRetriever):
    endpoint = "/search/all"

    def encode_query(self, raw_query: str) -> str:
        return encode_fofa_query(raw_query)

    def build_params(self, request: QueryRequest) -> Dict[str, str]:
        credentials = self.descriptor.credentials
        params = {
            "qbase64": self.encode_query(request.raw_query),
            "email": credentials.get("email", ""),
            "key": credentials.get("key", ""),
            "page": str(request.page),
            "size": str(request.size),
        }
        if request.fields:
            params["fields"] = ",".join(request.fields)
        return params

    def parse_response(self, raw: bytes, request: Optional[QueryRequest] = None) -> SearchResponse:
        payload = self._load_json(raw)
        fields = request.fields if request is not None else None

        if payload.get("error"):
            return build_error_response("error", str(payload.get("errmsg") or ""))

        rows = payload.get("results") or []
        if not isinstance(rows, list):
            rows = []
        records: List[Record] = [_row_to_record(row, fields) for row in rows]
        extra = {
            "mode": payload.get("mode"),
            "page": self._coerce_int(payload.get("page")),
            "matched": self._coerce_int(payload.get("size")),
        }
        # The report header counts the rows on this page.
        return build_response(total_count=len(records), records=records, extra=extra)

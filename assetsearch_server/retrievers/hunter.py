import base64
import logging
from typing import Any, Dict, List, Optional

from .base import BaseRetriever
from ..models.schema import (
    AssetType,
    QueryRequest,
    Record,
    SearchResponse,
    build_error_response,
    build_response,
)

logger = logging.getLogger("assetsearch")

HUNTER_SUCCESS_CODE = 200


def encode_hunter_query(raw_query: str) -> str:
    """Hunter expects ``search`` as URL-safe base64 (``-``/``_``, padded)."""
    return base64.urlsafe_b64encode(raw_query.encode("utf-8")).decode("ascii")


class HunterRetriever(BaseRetriever):
    # The configured base URL already points at the search endpoint.
    endpoint = ""

    def encode_query(self, raw_query: str) -> str:
        return encode_hunter_query(raw_query)

    def build_params(self, request: QueryRequest) -> Dict[str, str]:
        asset_type = request.asset_type if request.asset_type is not None else AssetType.WEB
        params = {
            "api-key": self.descriptor.credentials.get("api_key", ""),
            "search": self.encode_query(request.raw_query),
            "page": str(request.page),
            "page_size": str(request.size),
            "is_web": str(int(asset_type)),
        }
        time_range = request.time_range
        if time_range is not None:
            if time_range.start:
                params["start_time"] = time_range.start
            if time_range.end:
                params["end_time"] = time_range.end
        return params

    def parse_response(self, raw: bytes, request: Optional[QueryRequest] = None) -> SearchResponse:
        payload = self._load_json(raw)

        code = self._coerce_int(payload.get("code"))
        if code != HUNTER_SUCCESS_CODE:
            return build_error_response(payload.get("code"), str(payload.get("message") or ""))

        data = payload.get("data") or {}
        if not isinstance(data, dict):
            data = {}
        items = data.get("arr") or []
        records: List[Record] = [dict(item) for item in items if isinstance(item, dict)]
        extra: Dict[str, Any] = {
            "time": data.get("time"),
            "consume_quota": data.get("consume_quota"),
            "rest_quota": data.get("rest_quota"),
        }
        if extra["rest_quota"]:
            logger.info("hunter quota: %s, %s", extra["consume_quota"], extra["rest_quota"])
        return build_response(total_count=data.get("total"), records=records, extra=extra)

"""
Base retriever classes and protocol definitions.
"""
import json
import logging
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlencode

import requests

from ..core.config import DEFAULT_HTTP_TIMEOUT
from ..core.error import BackendError, DecodeError, TransportError
from ..models.schema import BackendDescriptor, QueryRequest, SearchResponse

logger = logging.getLogger("assetsearch")

# Body excerpt carried in DecodeError messages.
_BODY_EXCERPT = 200


class Retriever(Protocol):
    """
    Protocol defining the interface for search backends.
    """
    def search(self, request: QueryRequest) -> SearchResponse:
        ...


class BaseRetriever:
    """
    Shared HTTP mechanics for search backends.

    Subclasses own the wire contract: ``encode_query``, ``build_params`` and
    ``parse_response``. This class issues exactly one GET per ``search`` call,
    with a bounded timeout and no retry.
    """

    endpoint = ""

    def __init__(self, descriptor: BackendDescriptor, timeout: float = DEFAULT_HTTP_TIMEOUT) -> None:
        self.descriptor = descriptor
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.descriptor.id

    def encode_query(self, raw_query: str) -> str:
        raise NotImplementedError

    def build_params(self, request: QueryRequest) -> Dict[str, str]:
        raise NotImplementedError

    def parse_response(self, raw: bytes, request: Optional[QueryRequest] = None) -> SearchResponse:
        raise NotImplementedError

    def build_url(self, request: QueryRequest) -> str:
        """
        Full outbound URL. Unset optional parameters are left out rather
        than sent empty.
        """
        params = {k: v for k, v in self.build_params(request).items() if v is not None and v != ""}
        return f"{self.descriptor.base_url}{self.endpoint}?{urlencode(params)}"

    def search(self, request: QueryRequest) -> SearchResponse:
        url = self.build_url(request)
        logger.info(
            "%s search: page=%s, size=%s, query=%s",
            self.name,
            request.page,
            request.size,
            request.raw_query,
        )
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise TransportError(f"{self.name} request timed out after {self.timeout:g}s: {exc}")
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"{self.name} request failed: {exc}")

        if not 200 <= response.status_code < 300:
            excerpt = (response.text or "")[:_BODY_EXCERPT]
            raise DecodeError(
                f"{self.name} returned HTTP {response.status_code}: {excerpt}",
                {"status_code": response.status_code},
            )

        result = self.parse_response(response.content, request)
        if not result.ok:
            raise BackendError(result.backend_error.code, result.backend_error.message)
        logger.info("%s returned %d records (total %d)", self.name, len(result.records), result.total_count)
        return result

    def _load_json(self, raw: bytes) -> Dict[str, Any]:
        """
        Decode a JSON object envelope; anything else is a DecodeError.
        """
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"{self.name} returned a malformed response body: {exc}")
        if not isinstance(payload, dict):
            raise DecodeError(f"{self.name} returned an unexpected response body: expected a JSON object")
        return payload

    @staticmethod
    def _coerce_int(value: Any) -> Optional[int]:
        """
        Best-effort coercion to int.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            s = value.strip()
            if not s:
                return None
            try:
                return int(float(s))
            except ValueError:
                return None
        return None

"""
Tool dispatch: resolve a tool name, default its arguments, run one backend
search and render the report.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .config import FOFA, HUNTER, ServerConfig
from .error import AssetSearchError, UnknownToolError, log_error
from ..models.schema import SearchResponse
from ..retrievers.base import Retriever
from ..retrievers.fofa import FofaRetriever
from ..retrievers.hunter import HunterRetriever
from ..search.formatter import format_fofa_report, format_hunter_report
from ..search.params import FOFA_TOOL, HUNTER_TOOL, ToolSpec, build_query_request

logger = logging.getLogger("assetsearch")

Formatter = Callable[[SearchResponse], str]


@dataclass(frozen=True)
class ToolBinding:
    spec: ToolSpec
    retriever: Retriever
    formatter: Formatter


@dataclass(frozen=True)
class ToolResponse:
    """Response frame for one invocation."""
    text: str
    is_error: bool = False


# backend id -> (tool spec, retriever class, report formatter)
BACKEND_REGISTRY: Dict[str, tuple] = {
    FOFA: (FOFA_TOOL, FofaRetriever, format_fofa_report),
    HUNTER: (HUNTER_TOOL, HunterRetriever, format_hunter_report),
}


class ToolDispatcher:
    """
    Routes named invocations to their retriever.

    Holds no per-invocation state; each call builds its own request and
    response.
    """

    def __init__(self, bindings: Iterable[ToolBinding]) -> None:
        self._bindings: Dict[str, ToolBinding] = {}
        for binding in bindings:
            self._bindings[binding.spec.name] = binding

    @property
    def tool_names(self) -> List[str]:
        return list(self._bindings)

    def get(self, name: str) -> Optional[ToolBinding]:
        return self._bindings.get(name)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": binding.spec.name,
                "description": binding.spec.description,
                "inputSchema": binding.spec.input_schema(),
            }
            for binding in self._bindings.values()
        ]

    def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Run one invocation and return the text report.

        Raises:
            UnknownToolError: no tool registered under ``name``
            ParameterError: arguments cannot be defaulted into a request
            TransportError / DecodeError / BackendError: from the retriever
        """
        binding = self._bindings.get(name)
        if binding is None:
            raise UnknownToolError(name)

        request = build_query_request(binding.spec, arguments or {})
        response = binding.retriever.search(request)
        return binding.formatter(response)

    def handle(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResponse:
        """
        Run one invocation and wrap the outcome in a response frame. Errors
        from the taxonomy become error frames carrying their message as is.
        """
        logger.info("Tool call: %s", name)
        try:
            text = self.invoke(name, arguments)
        except AssetSearchError as exc:
            log_error(exc, logger, context={"tool": name}, level="WARNING")
            return ToolResponse(text=exc.message, is_error=True)
        except Exception as exc:
            log_error(exc, logger, context={"tool": name})
            raise
        return ToolResponse(text=text)


def build_dispatcher(config: ServerConfig) -> ToolDispatcher:
    """Bind one retriever per configured backend."""
    bindings = []
    for backend_id, descriptor in config.backends.items():
        spec, retriever_cls, formatter = BACKEND_REGISTRY[backend_id]
        retriever = retriever_cls(descriptor, timeout=config.http_timeout)
        bindings.append(ToolBinding(spec=spec, retriever=retriever, formatter=formatter))
    return ToolDispatcher(bindings)

"""
Retrievers module: backend-specific request building and response parsing.
"""
from .base import BaseRetriever, Retriever
from .fofa import FofaRetriever, encode_fofa_query
from .hunter import HunterRetriever, encode_hunter_query

__all__ = [
    "BaseRetriever",
    "Retriever",
    "FofaRetriever",
    "HunterRetriever",
    "encode_fofa_query",
    "encode_hunter_query",
]

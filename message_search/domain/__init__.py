"""Domain layer: entities, option models and exceptions."""

from .entities import (
    AddResult,
    FieldMatch,
    Highlight,
    IndexedMessage,
    IndexResult,
    MessageView,
    SearchHit,
    SearchResponse,
)
from .exceptions import (
    IndexNotFoundException,
    MessageSearchException,
    ProcessingException,
    ValidationException,
)
from .models import SearchFilters, SearchOptions, SortBy, SortOrder

__all__ = [
    "AddResult",
    "FieldMatch",
    "Highlight",
    "IndexedMessage",
    "IndexResult",
    "MessageView",
    "SearchHit",
    "SearchResponse",
    "IndexNotFoundException",
    "MessageSearchException",
    "ProcessingException",
    "ValidationException",
    "SearchFilters",
    "SearchOptions",
    "SortBy",
    "SortOrder",
]

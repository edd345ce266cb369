"""
Per-session fuzzy message search.

Indexes chat messages per conversation, answers ranked fuzzy queries,
caches recent results and offers autocomplete suggestions.
"""

from .domain.entities import (
    AddResult,
    Highlight,
    IndexedMessage,
    IndexResult,
    MessageView,
    SearchHit,
    SearchResponse,
)
from .domain.exceptions import (
    IndexNotFoundException,
    MessageSearchException,
    ProcessingException,
    ValidationException,
)
from .domain.models import SearchFilters, SearchOptions, SortBy, SortOrder
from .engine import MessageSearchEngine

__version__ = "0.1.0"

__all__ = [
    "AddResult",
    "Highlight",
    "IndexedMessage",
    "IndexResult",
    "IndexNotFoundException",
    "MessageSearchEngine",
    "MessageSearchException",
    "MessageView",
    "ProcessingException",
    "SearchFilters",
    "SearchHit",
    "SearchOptions",
    "SearchResponse",
    "SortBy",
    "SortOrder",
    "ValidationException",
]

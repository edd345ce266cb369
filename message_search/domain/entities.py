"""
Domain entities for message search.

Core objects representing indexed messages, match details and search
responses. These entities are framework-agnostic and carry no matching logic.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class IndexedMessage:
    """
    Canonical, indexable form of a chat message.

    Created by the message normalizer from heterogeneous raw records and
    never modified afterwards.

    Attributes:
        id: Identifier of the source message
        content: Message text
        sender: Sender name, role, or "unknown"
        timestamp: Message time (timezone-aware) if known
        type: Message type ("message", "system", "file", ...)
        metadata: Optional attachment/command/tool/project fields and flags
        searchable_content: Lowercased content plus textual metadata values
    """

    id: Any
    content: str = ""
    sender: str = "unknown"
    timestamp: Optional[datetime] = None
    type: str = "message"
    metadata: Dict[str, Any] = field(default_factory=dict)
    searchable_content: str = ""

    @property
    def has_attachment(self) -> bool:
        """True when the message carries a named file attachment."""
        return bool(self.metadata.get("file"))


@dataclass(frozen=True)
class FieldMatch:
    """
    Match of the query against one field of a message.

    Attributes:
        key: Field name ("content", "sender", "metadata.file", ...)
        value: Full field value that matched
        indices: Half-open (start, end) character ranges inside ``value``
        score: Field distance (0 = exact, 1 = no similarity)
    """

    key: str
    value: str
    indices: Tuple[Tuple[int, int], ...]
    score: float

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "indices": [list(span) for span in self.indices],
            "score": self.score,
        }


@dataclass(frozen=True)
class Highlight:
    """Context snippet around a single content match."""

    snippet: str
    start_index: int
    end_index: int
    original_start: int
    original_end: int

    def to_dict(self) -> dict:
        return {
            "snippet": self.snippet,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "originalStart": self.original_start,
            "originalEnd": self.original_end,
        }


@dataclass(frozen=True)
class MessageView:
    """Projection of an indexed message returned with a search hit."""

    id: Any
    content: Optional[str]
    sender: str
    timestamp: Optional[datetime]
    type: str
    metadata: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "content": self.content,
            "sender": self.sender,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "type": self.type,
        }
        if self.metadata is not None:
            result["metadata"] = dict(self.metadata)
        return result


@dataclass(frozen=True)
class SearchHit:
    """
    A single ranked search result.

    Attributes:
        message: Projected message
        score: Native match score (lower is better, 0-1)
        relevance: Boosted relevance (higher is better, 0-1)
        matches: Per-field match details
        highlights: Content snippets, None when highlighting is disabled
    """

    message: MessageView
    score: float
    relevance: float
    matches: Tuple[FieldMatch, ...] = ()
    highlights: Optional[Tuple[Highlight, ...]] = None

    def to_dict(self) -> dict:
        result = {
            "message": self.message.to_dict(),
            "score": self.score,
            "relevance": self.relevance,
            "matches": [match.to_dict() for match in self.matches],
        }
        if self.highlights is not None:
            result["highlights"] = [h.to_dict() for h in self.highlights]
        return result


@dataclass(frozen=True)
class SearchResponse:
    """
    Paginated search response for one session.

    ``total`` counts every filtered match before pagination and ``took`` is
    the search duration in milliseconds.
    """

    results: Tuple[SearchHit, ...]
    total: int
    query: str
    session_id: str
    took: float
    has_more: bool = False
    index_size: int = 0

    @classmethod
    def empty(cls, session_id: str, query: str, index_size: int = 0) -> "SearchResponse":
        """Response returned for queries too short to search."""
        return cls(
            results=(),
            total=0,
            query=query,
            session_id=session_id,
            took=0.0,
            has_more=False,
            index_size=index_size,
        )

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for adapters and serialization."""
        return {
            "results": [hit.to_dict() for hit in self.results],
            "total": self.total,
            "query": self.query,
            "sessionId": self.session_id,
            "took": self.took,
            "hasMore": self.has_more,
            "indexSize": self.index_size,
        }


@dataclass(frozen=True)
class IndexResult:
    """Outcome of a full session (re)index."""

    indexed: int
    total: int
    truncated: bool

    def to_dict(self) -> dict:
        return {"indexed": self.indexed, "total": self.total, "truncated": self.truncated}


@dataclass(frozen=True)
class AddResult:
    """Outcome of appending messages to a session index."""

    added: int
    total: int

    def to_dict(self) -> dict:
        return {"added": self.added, "total": self.total}

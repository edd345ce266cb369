"""
Per-session index storage.

Owns the bounded message list and the match structure of every indexed
session. Indexes are replaced wholesale on reindex and rebuilt from the
combined message list on append.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..domain.entities import AddResult, IndexedMessage, IndexResult
from ..domain.exceptions import (
    MessageSearchException,
    ProcessingException,
    ValidationException,
)
from .fuzzy_matcher import FuzzyMatcher, MessageIndex
from .message_normalizer import normalize_message

logger = logging.getLogger(__name__)

DEFAULT_MAX_INDEX_SIZE = 10000


def validate_session_id(session_id: Any) -> str:
    """
    Validate a session identifier.

    Raises:
        ValidationException: If the id is not a non-empty string
    """
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValidationException("session_id", session_id, "Session ID is required")
    return session_id


def validate_messages(messages: Any, field_name: str = "messages") -> List[Any]:
    """
    Validate a batch of raw messages and materialize it as a list.

    Raises:
        ValidationException: If the batch is not an iterable of records
    """
    if isinstance(messages, (str, bytes, Mapping)) or not isinstance(messages, Iterable):
        raise ValidationException(field_name, type(messages).__name__, "Must be an iterable of messages")
    return list(messages)


@dataclass
class SessionIndex:
    """Message list and match structure of one session."""

    messages: List[IndexedMessage]
    index: MessageIndex
    by_id: Dict[Any, IndexedMessage] = field(default_factory=dict)

    def __post_init__(self):
        for message in self.messages:
            # First occurrence wins for duplicate ids
            self.by_id.setdefault(message.id, message)

    def __len__(self) -> int:
        return len(self.messages)

    def find_message(self, message_id: Any) -> Optional[IndexedMessage]:
        return self.by_id.get(message_id)


class SessionIndexStore:
    """
    Store of session indexes keyed by session id.

    The message list of a session never exceeds ``max_index_size``; older
    messages are dropped first, by arrival order.
    """

    def __init__(
        self,
        max_index_size: int = DEFAULT_MAX_INDEX_SIZE,
        matcher: Optional[FuzzyMatcher] = None,
    ):
        """
        Initialize index store.

        Args:
            max_index_size: Maximum number of messages kept per session
            matcher: Fuzzy matcher shared by every session index
        """
        self.max_index_size = max_index_size
        self.matcher = matcher or FuzzyMatcher()
        self._sessions: Dict[str, SessionIndex] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def total_messages(self) -> int:
        return sum(len(session) for session in self._sessions.values())

    def get(self, session_id: str) -> Optional[SessionIndex]:
        return self._sessions.get(session_id)

    def message_count(self, session_id: str) -> int:
        session = self._sessions.get(session_id)
        return len(session) if session else 0

    def index_messages(self, session_id: str, messages: Any) -> IndexResult:
        """
        Build a fresh index for a session, replacing any previous one.

        Args:
            session_id: Session identifier
            messages: Iterable of raw message records

        Returns:
            IndexResult with indexed/total counts and the truncation flag

        Raises:
            ValidationException: If session_id or messages are invalid
            ProcessingException: If normalization or index construction fails
        """
        validate_session_id(session_id)
        batch = validate_messages(messages)

        to_index = batch[-self.max_index_size:]
        self._sessions[session_id] = self._build(to_index, operation="indexing")

        logger.info(f"Indexed {len(to_index)} messages for session {session_id}")
        return IndexResult(
            indexed=len(to_index),
            total=len(batch),
            truncated=len(batch) > self.max_index_size,
        )

    def add_messages(self, session_id: str, new_messages: Any) -> Optional[AddResult]:
        """
        Append messages to a session and rebuild its index.

        The match structure is rebuilt from the full combined list.

        Returns:
            AddResult, or None when there was nothing to add

        Raises:
            ValidationException: If session_id or new_messages are invalid
            ProcessingException: If normalization or index construction fails
        """
        validate_session_id(session_id)
        batch = validate_messages(new_messages, "new_messages")
        if not batch:
            return None

        existing = self._sessions.get(session_id)
        processed = self._normalize(batch, operation="append")
        combined = (existing.messages if existing else []) + processed
        combined = combined[-self.max_index_size:]

        self._sessions[session_id] = self._build_index(combined, operation="append")

        logger.debug(
            f"Added {len(processed)} messages to session {session_id} "
            f"(index size {len(combined)})"
        )
        return AddResult(added=len(processed), total=len(combined))

    def clear_session(self, session_id: str) -> bool:
        """Drop a session index. Returns True if one existed."""
        return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        count = len(self._sessions)
        self._sessions.clear()
        logger.info(f"Cleared {count} session indexes")

    def _build(self, raw_messages: List[Any], operation: str) -> SessionIndex:
        return self._build_index(self._normalize(raw_messages, operation), operation)

    def _normalize(self, raw_messages: List[Any], operation: str) -> List[IndexedMessage]:
        try:
            return [normalize_message(raw) for raw in raw_messages]
        except MessageSearchException:
            raise
        except Exception as e:
            raise ProcessingException(operation, str(e)) from e

    def _build_index(self, messages: List[IndexedMessage], operation: str) -> SessionIndex:
        try:
            return SessionIndex(messages=messages, index=MessageIndex(messages, self.matcher))
        except Exception as e:
            raise ProcessingException(operation, str(e)) from e

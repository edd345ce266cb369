"""
Autocomplete suggestions from a session index.
"""

import logging
from typing import List

from .index_store import SessionIndexStore

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_THRESHOLD = 0.6
MIN_PARTIAL_QUERY_LENGTH = 2
MIN_SUGGESTION_LENGTH = 3

# Internal matching aid, never offered to users
HIDDEN_KEYS = frozenset({"searchable_content"})


class SuggestionEngine:
    """
    Produces autocomplete candidates for partial queries.

    Matches with a looser threshold than regular search, then collects
    matched field values and content words containing the partial query.
    Candidates keep match-engine order; no further ranking is applied.
    """

    def __init__(
        self,
        store: SessionIndexStore,
        threshold: float = DEFAULT_SUGGESTION_THRESHOLD,
    ):
        self.store = store
        self.threshold = threshold

    def suggest(self, session_id: str, partial_query: str, limit: int = 5) -> List[str]:
        """
        Get suggestions for a partial query.

        Args:
            session_id: Session to draw suggestions from
            partial_query: What the user typed so far
            limit: Maximum number of suggestions

        Returns:
            Up to ``limit`` unique suggestions; empty for unknown sessions or
            partial queries shorter than 2 characters
        """
        if not session_id or not partial_query or len(partial_query) < MIN_PARTIAL_QUERY_LENGTH:
            return []
        if limit <= 0:
            return []

        session = self.store.get(session_id)
        if session is None:
            return []

        needle = partial_query.lower()
        results = session.index.search(
            partial_query.strip(), threshold=self.threshold, limit=limit * 2
        )

        # dict keeps first-seen order while deduplicating
        suggestions: dict = {}
        for result in results:
            for match in result.matches:
                if match.key in HIDDEN_KEYS:
                    continue
                if len(match.value) >= MIN_SUGGESTION_LENGTH:
                    suggestions.setdefault(match.value, None)

            for word in result.item.content.split():
                if len(word) >= MIN_SUGGESTION_LENGTH and needle in word.lower():
                    suggestions.setdefault(word, None)

        logger.debug(
            f"{len(suggestions)} suggestion candidates for '{partial_query}' in {session_id}"
        )
        return list(suggestions)[:limit]

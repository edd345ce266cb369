"""
Relevance scoring system for search results.

Turns native match distances into boosted relevance scores and orders
search hits by relevance, date or raw score.
"""

from datetime import datetime, timezone
from typing import Iterable, List

from ..domain.entities import FieldMatch, SearchHit
from ..domain.models import SortBy, SortOrder

# Undated messages sort as the oldest
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class RelevanceScorer:
    """
    Calculate relevance scores for search results.

    Scoring steps:
    1. Invert the native distance (relevance = 1 - score)
    2. Near-exact boost (x1.5) when the score is below 0.1
    3. Content boost (x1.2) when any match was on the content field
    4. Clamp to 1.0

    Both boosts stack when they apply.
    """

    EXACT_MATCH_THRESHOLD = 0.1
    EXACT_MATCH_BOOST = 1.5
    CONTENT_MATCH_BOOST = 1.2
    CONTENT_KEY = "content"
    MAX_RELEVANCE = 1.0

    def calculate(self, score: float, matches: Iterable[FieldMatch]) -> float:
        """
        Calculate relevance for a match.

        Args:
            score: Native match score (lower = better, 0-1)
            matches: Field matches that contributed to the score

        Returns:
            Relevance between 0.0 and 1.0
        """
        relevance = 1.0 - score

        if score < self.EXACT_MATCH_THRESHOLD:
            relevance *= self.EXACT_MATCH_BOOST

        if any(match.key == self.CONTENT_KEY for match in matches or ()):
            relevance *= self.CONTENT_MATCH_BOOST

        return min(relevance, self.MAX_RELEVANCE)

    def sort(
        self,
        hits: List[SearchHit],
        sort_by: SortBy = SortBy.RELEVANCE,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> List[SearchHit]:
        """
        Sort search hits.

        Args:
            hits: Hits to sort
            sort_by: relevance, date (message timestamp) or score (native score)
            sort_order: desc or asc

        Returns:
            New sorted list (stable for equal keys)
        """
        if sort_by == SortBy.DATE:
            key = lambda hit: hit.message.timestamp or _OLDEST  # noqa: E731
        elif sort_by == SortBy.SCORE:
            key = lambda hit: hit.score  # noqa: E731
        else:
            key = lambda hit: hit.relevance  # noqa: E731

        return sorted(hits, key=key, reverse=sort_order == SortOrder.DESC)

    def get_stats(self) -> dict:
        """
        Get scorer configuration.

        Returns:
            Dictionary with boost factors
        """
        return {
            "exact_match_threshold": self.EXACT_MATCH_THRESHOLD,
            "exact_match_boost": self.EXACT_MATCH_BOOST,
            "content_match_boost": self.CONTENT_MATCH_BOOST,
            "max_relevance": self.MAX_RELEVANCE,
        }

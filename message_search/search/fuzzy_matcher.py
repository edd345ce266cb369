"""
Fuzzy matching engine for chat messages.

Provides typo-tolerant matching of search terms against message fields
using rapidfuzz partial alignment, and the per-session match structure
(``MessageIndex``) built over a list of indexed messages.
"""

import logging
import re
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rapidfuzz import fuzz

from ..domain.entities import FieldMatch, IndexedMessage

logger = logging.getLogger(__name__)

# Stand-in for an exact (zero distance) field match in the weighted product
EPSILON = sys.float_info.epsilon

# Quoted include-phrase ('...', closing quote optional) or a bare term
TERM_PATTERN = re.compile(r"'([^']*)'?|(\S+)")

Span = Tuple[int, int]


@dataclass(frozen=True)
class SearchKey:
    """A message field the index matches against, with its weight."""

    name: str
    weight: float


# Weights sum to 1.0
SEARCH_KEYS: Tuple[SearchKey, ...] = (
    SearchKey("content", 0.6),
    SearchKey("sender", 0.2),
    SearchKey("searchable_content", 0.1),
    SearchKey("metadata.file", 0.05),
    SearchKey("metadata.command", 0.05),
)


@dataclass(frozen=True)
class QueryTerm:
    """
    One parsed term of a match pattern.

    Attributes:
        text: Lowercased term text
        exact: True for quoted phrases, matched as exact substrings
    """

    text: str
    exact: bool = False


@dataclass(frozen=True)
class MatchResult:
    """
    A message that matched every term of a pattern.

    Attributes:
        item: The matched message
        ref_index: Position of the message in the index
        score: Combined distance (0 = perfect, 1 = worst)
        matches: Per-field match details
    """

    item: IndexedMessage
    ref_index: int
    score: float
    matches: Tuple[FieldMatch, ...]


def parse_pattern(pattern: str, min_length: int = 2) -> List[QueryTerm]:
    """
    Split a normalized pattern into query terms.

    Whitespace separates terms; ``'some phrase'`` is kept as a single exact
    term. Terms shorter than ``min_length`` are dropped.

    Examples:
        "helo wrld" -> [helo, wrld]
        "'exact phrase' other" -> ['exact phrase' (exact), other]
    """
    terms: List[QueryTerm] = []
    for match in TERM_PATTERN.finditer(pattern or ""):
        phrase, word = match.group(1), match.group(2)
        if phrase is not None:
            term = QueryTerm(text=phrase.strip().lower(), exact=True)
        else:
            term = QueryTerm(text=word.lower())

        if len(term.text) >= min_length:
            terms.append(term)
    return terms


class FuzzyMatcher:
    """
    Typo-tolerant term matching against a single field value.

    Supports:
    - Fuzzy matching: best partial alignment of the term inside the text
    - Whole-value matching when the text is shorter than the term
    - Exact include matching for quoted phrases (every occurrence reported)

    Distances are ``1 - similarity`` so lower is better, in [0, 1].
    """

    DEFAULT_THRESHOLD = 0.3
    DEFAULT_MIN_MATCH_CHAR_LENGTH = 2

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
    ):
        """
        Initialize fuzzy matcher.

        Args:
            threshold: Maximum distance for a term to count as a match (0-1)
            min_match_char_length: Minimum length of a matched span
        """
        self.threshold = threshold
        self.min_match_char_length = min_match_char_length

    def match_term(
        self, term: QueryTerm, text: str, threshold: Optional[float] = None
    ) -> Optional[Tuple[float, List[Span]]]:
        """
        Match one term against a lowercased field value.

        Args:
            term: Parsed query term
            text: Lowercased field value
            threshold: Override for the matcher threshold

        Returns:
            Tuple of (distance, matched spans) or None if the term does not match
        """
        if not text or not term.text:
            return None

        if term.exact:
            spans = self._find_all(term.text, text)
            return (0.0, spans) if spans else None

        limit = self.threshold if threshold is None else threshold
        cutoff = (1.0 - limit) * 100

        if len(term.text) <= len(text):
            alignment = fuzz.partial_ratio_alignment(term.text, text, score_cutoff=cutoff)
            if alignment is None:
                return None
            similarity = alignment.score
            span = (alignment.dest_start, alignment.dest_end)
        else:
            # Field shorter than the term: compare whole values
            similarity = fuzz.ratio(term.text, text, score_cutoff=cutoff)
            span = (0, len(text))

        distance = 1.0 - similarity / 100.0
        if distance > limit:
            return None
        if span[1] - span[0] < self.min_match_char_length:
            return None

        return (distance, [span])

    def _find_all(self, needle: str, haystack: str) -> List[Span]:
        spans: List[Span] = []
        start = haystack.find(needle)
        while start != -1:
            spans.append((start, start + len(needle)))
            start = haystack.find(needle, start + 1)
        return spans

    def get_stats(self) -> dict:
        """
        Get matcher configuration.

        Returns:
            Dictionary with matcher settings
        """
        return {
            "threshold": self.threshold,
            "min_match_char_length": self.min_match_char_length,
            "algorithm": "rapidfuzz.partial_ratio",
        }


def _field_value(message: IndexedMessage, key: str) -> Optional[str]:
    if key.startswith("metadata."):
        value = message.metadata.get(key.split(".", 1)[1])
    else:
        value = getattr(message, key, None)
    return value if isinstance(value, str) and value else None


class MessageIndex:
    """
    Approximate-match structure over one session's messages.

    Field values are extracted and lowercased once at build time; the index
    is immutable and rebuilt wholesale when the message list changes.
    """

    def __init__(
        self,
        messages: Sequence[IndexedMessage],
        matcher: Optional[FuzzyMatcher] = None,
        keys: Tuple[SearchKey, ...] = SEARCH_KEYS,
    ):
        self.messages: List[IndexedMessage] = list(messages)
        self.matcher = matcher or FuzzyMatcher()
        self.keys = keys

        self._fields = [self._extract_fields(message) for message in self.messages]
        logger.debug(f"Built message index over {len(self.messages)} messages")

    def __len__(self) -> int:
        return len(self.messages)

    def _extract_fields(self, message: IndexedMessage) -> List[Tuple[SearchKey, str, str]]:
        fields = []
        for key in self.keys:
            value = _field_value(message, key.name)
            if value:
                fields.append((key, value, value.lower()))
        return fields

    def search(
        self, pattern: str, threshold: Optional[float] = None, limit: Optional[int] = None
    ) -> List[MatchResult]:
        """
        Match a normalized pattern against every indexed message.

        Args:
            pattern: Normalized query pattern
            threshold: Override for the matcher threshold
            limit: Maximum number of results to return

        Returns:
            Matches sorted by score (best first), ties in index order
        """
        terms = parse_pattern(pattern, self.matcher.min_match_char_length)
        if not terms:
            return []

        results = []
        for ref_index, message in enumerate(self.messages):
            result = self._match_message(ref_index, message, terms, threshold)
            if result is not None:
                results.append(result)

        results.sort(key=lambda r: (r.score, r.ref_index))
        if limit is not None:
            return results[:limit]
        return results

    def _match_message(
        self,
        ref_index: int,
        message: IndexedMessage,
        terms: List[QueryTerm],
        threshold: Optional[float],
    ) -> Optional[MatchResult]:
        matched_terms = set()
        field_matches = []
        score = 1.0

        for key, value, lowered in self._fields[ref_index]:
            distances = []
            spans: List[Span] = []
            for position, term in enumerate(terms):
                outcome = self.matcher.match_term(term, lowered, threshold)
                if outcome is None:
                    continue
                distance, term_spans = outcome
                matched_terms.add(position)
                distances.append(distance)
                spans.extend(term_spans)

            if not distances:
                continue

            field_score = sum(distances) / len(distances)
            field_matches.append(
                FieldMatch(key=key.name, value=value, indices=tuple(spans), score=field_score)
            )
            score *= max(field_score, EPSILON) ** key.weight

        # Every term must match somewhere in the message
        if len(matched_terms) < len(terms):
            return None

        return MatchResult(
            item=message, ref_index=ref_index, score=score, matches=tuple(field_matches)
        )

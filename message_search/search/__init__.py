"""
Search module for per-session message search.

Provides message normalization, fuzzy indexing, query normalization,
relevance scoring, highlighting, execution and suggestions.
"""
from .executor import SearchExecutor
from .fuzzy_matcher import FuzzyMatcher, MatchResult, MessageIndex
from .highlighter import HighlightBuilder
from .index_store import SessionIndex, SessionIndexStore
from .message_normalizer import normalize_message
from .query_normalizer import QueryNormalizer
from .relevance_scorer import RelevanceScorer
from .suggestions import SuggestionEngine

__all__ = [
    "FuzzyMatcher",
    "HighlightBuilder",
    "MatchResult",
    "MessageIndex",
    "QueryNormalizer",
    "RelevanceScorer",
    "SearchExecutor",
    "SessionIndex",
    "SessionIndexStore",
    "SuggestionEngine",
    "normalize_message",
]

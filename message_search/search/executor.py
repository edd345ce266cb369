"""
Search execution.

Runs a normalized query against a session index: cache lookup, fuzzy
match, post-match filters, projection, relevance, sorting and pagination.
"""

import logging
import time
from types import MappingProxyType
from typing import Optional

from ..cache.result_cache import ResultCache, make_cache_key
from ..domain.entities import IndexedMessage, MessageView, SearchHit, SearchResponse
from ..domain.exceptions import (
    IndexNotFoundException,
    MessageSearchException,
    ProcessingException,
)
from ..domain.models import SearchOptions
from ..metrics import MetricsCollector
from .fuzzy_matcher import FuzzyMatcher, MatchResult
from .highlighter import HighlightBuilder
from .index_store import SessionIndexStore, validate_session_id
from .query_normalizer import QueryNormalizer
from .relevance_scorer import RelevanceScorer

logger = logging.getLogger(__name__)


class SearchExecutor:
    """
    Executes searches against the session index store.

    Pipeline:
    1. Result cache lookup (key: session, normalized query, limit, sort_by)
    2. Fuzzy match over the session index
    3. Filters (sender, type, date range, attachment)
    4. Projection, highlights and relevance per hit
    5. Sort, then paginate by offset/limit
    """

    def __init__(
        self,
        store: SessionIndexStore,
        metrics: MetricsCollector,
        cache: Optional[ResultCache] = None,
        query_normalizer: Optional[QueryNormalizer] = None,
        scorer: Optional[RelevanceScorer] = None,
        highlighter: Optional[HighlightBuilder] = None,
        threshold: float = FuzzyMatcher.DEFAULT_THRESHOLD,
        enable_highlighting: bool = True,
    ):
        """
        Initialize search executor.

        Args:
            store: Session index store to search
            metrics: Metrics collector to record searches and cache lookups
            cache: Result cache, None disables caching
            query_normalizer: Query normalizer
            scorer: Relevance scorer
            highlighter: Highlight builder
            threshold: Fuzzy match threshold for searches
            enable_highlighting: Default for SearchOptions.enable_highlighting
        """
        self.store = store
        self.metrics = metrics
        self.cache = cache
        self.query_normalizer = query_normalizer or QueryNormalizer()
        self.scorer = scorer or RelevanceScorer()
        self.highlighter = highlighter or HighlightBuilder()
        self.threshold = threshold
        self.enable_highlighting = enable_highlighting

    def execute(
        self, session_id: str, query: str, options: Optional[SearchOptions] = None
    ) -> SearchResponse:
        """
        Search one session.

        Args:
            session_id: Session to search
            query: Raw query string
            options: Search options (defaults apply when omitted)

        Returns:
            SearchResponse; empty with total 0 for queries under 2 characters

        Raises:
            ValidationException: If session_id is missing
            IndexNotFoundException: If the session has never been indexed
            ProcessingException: If matching fails unexpectedly
        """
        validate_session_id(session_id)
        options = options or SearchOptions()

        if not self.query_normalizer.is_searchable(query):
            return SearchResponse.empty(session_id, query)

        start_time = time.perf_counter()
        try:
            return self._execute(session_id, query, options, start_time)
        except Exception:
            self.metrics.record_failure((time.perf_counter() - start_time) * 1000)
            raise

    def _execute(
        self, session_id: str, query: str, options: SearchOptions, start_time: float
    ) -> SearchResponse:
        pattern = self.query_normalizer.normalize(query)

        cache_key = None
        if self.cache is not None:
            cache_key = make_cache_key(session_id, pattern, options.limit, options.sort_by.value)
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.metrics.record_cache_hit()
                return cached
            self.metrics.record_cache_miss()

        session = self.store.get(session_id)
        if session is None:
            raise IndexNotFoundException(session_id)

        try:
            matches = session.index.search(pattern, threshold=self.threshold)
        except MessageSearchException:
            raise
        except Exception as e:
            raise ProcessingException("search", str(e)) from e

        if not options.filters.is_empty:
            matches = [match for match in matches if options.filters.accepts(match.item)]

        highlight = (
            self.enable_highlighting
            if options.enable_highlighting is None
            else options.enable_highlighting
        )

        hits = []
        for match in matches:
            message = session.find_message(match.item.id)
            if message is None:
                continue
            hits.append(self._build_hit(message, match, options, highlight))

        hits = self.scorer.sort(hits, options.sort_by, options.sort_order)
        end = options.offset + options.limit
        took = (time.perf_counter() - start_time) * 1000

        response = SearchResponse(
            results=tuple(hits[options.offset:end]),
            total=len(matches),
            query=query,
            session_id=session_id,
            took=took,
            has_more=len(matches) > end,
            index_size=len(session),
        )

        if cache_key is not None:
            self.cache.set(cache_key, response)

        self.metrics.record_search(took, len(matches))
        logger.debug(
            f"Search '{pattern}' in session {session_id}: {len(matches)} matches in {took:.2f}ms"
        )
        return response

    def _build_hit(
        self,
        message: IndexedMessage,
        match: MatchResult,
        options: SearchOptions,
        highlight: bool,
    ) -> SearchHit:
        metadata = None
        if options.include_metadata and message.metadata:
            # Read-only view: cached responses are shared between callers
            metadata = MappingProxyType(dict(message.metadata))

        view = MessageView(
            id=message.id,
            content=message.content if options.include_content else None,
            sender=message.sender,
            timestamp=message.timestamp,
            type=message.type,
            metadata=metadata,
        )

        highlights = None
        if highlight and match.matches:
            highlights = tuple(self.highlighter.build(message.content, match.matches))

        return SearchHit(
            message=view,
            score=match.score,
            relevance=self.scorer.calculate(match.score, match.matches),
            matches=match.matches,
            highlights=highlights,
        )

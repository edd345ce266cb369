"""
Message search engine.

Public facade tying together the session index store, search executor,
result cache, background cache sweeper, suggestion engine and metrics.
One engine serves any number of sessions for a single logical caller.
"""

from datetime import timedelta
from typing import Any, Iterable, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from .cache.cache_sweeper import CacheSweeper
from .cache.result_cache import ResultCache
from .config import Settings
from .config import settings as default_settings
from .domain.entities import AddResult, IndexResult, SearchResponse
from .domain.exceptions import MessageSearchException, ValidationException
from .domain.models import SearchOptions
from .metrics import (
    MetricsCollector,
    track_cache_eviction,
    track_index_operation,
    update_cache_size,
)
from .search.executor import SearchExecutor
from .search.fuzzy_matcher import FuzzyMatcher
from .search.highlighter import HighlightBuilder
from .search.index_store import SessionIndexStore
from .search.suggestions import SuggestionEngine

logger = structlog.get_logger(__name__)

OptionsInput = Union[SearchOptions, Mapping[str, Any], None]


def _to_seconds(value: Union[float, int, timedelta]) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class MessageSearchEngine:
    """
    Per-session fuzzy message search.

    The engine owns every piece of mutable state (indexes, cache, metrics,
    sweeper thread). It performs no locking of its own: callers must
    serialize indexing and searching of the same session.

    Example:
        engine = MessageSearchEngine()
        engine.index_messages("s1", [{"id": "m1", "content": "hello world"}])
        response = await engine.search("s1", "hello")
        engine.destroy()
    """

    def __init__(
        self,
        max_index_size: Optional[int] = None,
        cache_timeout: Optional[Union[float, timedelta]] = None,
        enable_cache: Optional[bool] = None,
        enable_highlighting: Optional[bool] = None,
        cache_cleanup_interval: Optional[Union[float, timedelta]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the engine and start the cache sweeper.

        Args:
            max_index_size: Messages kept per session (default 10000)
            cache_timeout: Result lifetime, seconds or timedelta (default 5 minutes)
            enable_cache: Cache search results (default True)
            enable_highlighting: Default highlighting for searches (default True)
            cache_cleanup_interval: Seconds between cache sweeps (default 60)
            settings: Configuration source for unspecified arguments
        """
        config = settings or default_settings

        self.max_index_size = config.MAX_INDEX_SIZE if max_index_size is None else max_index_size
        if self.max_index_size < 1:
            raise ValidationException("max_index_size", self.max_index_size, "Must be at least 1")

        self.cache_timeout = _to_seconds(
            config.CACHE_TIMEOUT_SECONDS if cache_timeout is None else cache_timeout
        )
        if self.cache_timeout <= 0:
            raise ValidationException("cache_timeout", cache_timeout, "Must be positive")

        self.enable_cache = config.ENABLE_CACHE if enable_cache is None else enable_cache
        self.enable_highlighting = (
            config.ENABLE_HIGHLIGHTING if enable_highlighting is None else enable_highlighting
        )
        sweep_interval = _to_seconds(
            config.CACHE_CLEANUP_INTERVAL_SECONDS
            if cache_cleanup_interval is None
            else cache_cleanup_interval
        )

        self.store = SessionIndexStore(
            max_index_size=self.max_index_size,
            matcher=FuzzyMatcher(threshold=config.SEARCH_THRESHOLD),
        )
        self.cache = ResultCache(ttl=self.cache_timeout, max_entries=config.CACHE_MAX_ENTRIES)
        self.metrics = MetricsCollector()
        self.executor = SearchExecutor(
            store=self.store,
            metrics=self.metrics,
            cache=self.cache if self.enable_cache else None,
            highlighter=HighlightBuilder(config.HIGHLIGHT_CONTEXT_CHARS),
            threshold=config.SEARCH_THRESHOLD,
            enable_highlighting=self.enable_highlighting,
        )
        self.suggestions = SuggestionEngine(self.store, threshold=config.SUGGESTION_THRESHOLD)

        self.sweeper = CacheSweeper(self.cache, interval=sweep_interval)
        self.sweeper.start()
        self._destroyed = False

        logger.info(
            "Message search engine initialized",
            max_index_size=self.max_index_size,
            cache_timeout=self.cache_timeout,
            enable_cache=self.enable_cache,
            enable_highlighting=self.enable_highlighting,
        )

    def __enter__(self) -> "MessageSearchEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def index_messages(self, session_id: str, messages: Iterable[Any]) -> IndexResult:
        """
        Index a session's messages, replacing any previous index.

        Only the most recent ``max_index_size`` messages are kept.

        Raises:
            ValidationException: If session_id or messages are invalid
            ProcessingException: If a message cannot be normalized
        """
        try:
            result = self.store.index_messages(session_id, messages)
        except MessageSearchException as e:
            track_index_operation("index", False, len(self.store))
            logger.error("Failed to index messages", session_id=session_id, error=e.message)
            raise

        # Responses cached for the replaced index are stale
        track_cache_eviction("invalidated", self.cache.invalidate_session(session_id))
        track_index_operation("index", True, len(self.store))
        logger.info(
            "Indexed messages",
            session_id=session_id,
            indexed=result.indexed,
            total=result.total,
            truncated=result.truncated,
        )
        return result

    def add_messages(self, session_id: str, new_messages: Iterable[Any]) -> Optional[AddResult]:
        """
        Append messages to a session index and invalidate its cached results.

        Returns:
            AddResult, or None when ``new_messages`` is empty

        Raises:
            ValidationException: If session_id or new_messages are invalid
            ProcessingException: If a message cannot be normalized
        """
        try:
            result = self.store.add_messages(session_id, new_messages)
        except MessageSearchException as e:
            track_index_operation("append", False, len(self.store))
            logger.error("Failed to add messages", session_id=session_id, error=e.message)
            raise

        if result is None:
            return None

        track_cache_eviction("invalidated", self.cache.invalidate_session(session_id))
        track_index_operation("append", True, len(self.store))
        logger.debug(
            "Added messages", session_id=session_id, added=result.added, total=result.total
        )
        return result

    async def search(
        self, session_id: str, query: str, options: OptionsInput = None
    ) -> SearchResponse:
        """
        Search a session.

        Args:
            session_id: Session to search
            query: Raw query (at least 2 characters after trimming)
            options: SearchOptions or a mapping of option fields

        Returns:
            SearchResponse

        Raises:
            ValidationException: If session_id or options are invalid
            IndexNotFoundException: If the session has never been indexed
            ProcessingException: If matching fails unexpectedly
        """
        search_options = self._coerce_options(options)
        try:
            return self.executor.execute(session_id, query, search_options)
        except MessageSearchException as e:
            logger.error("Search failed", session_id=session_id, query=query, error=e.message)
            raise

    async def get_suggestions(
        self, session_id: str, partial_query: str, limit: int = 5
    ) -> List[str]:
        """Autocomplete candidates for a partial query (at least 2 characters)."""
        return self.suggestions.suggest(session_id, partial_query, limit)

    def get_stats(self, session_id: Optional[str] = None) -> dict:
        """
        Get engine statistics.

        Args:
            session_id: Report on one session instead of all sessions

        Returns:
            Dictionary with index/cache sizes, raw metrics, average search
            time (ms) and cache hit rate. Engine-wide stats also carry the
            result cache counters (including size-limit evictions) and the
            matcher and scorer settings.
        """
        if session_id:
            stats = {
                "indexed_messages": self.store.message_count(session_id),
                "has_index": session_id in self.store,
                "cache_size": self.cache.session_size(session_id),
            }
        else:
            cache_size = len(self.cache)
            update_cache_size(cache_size)
            stats = {
                "total_sessions": len(self.store),
                "total_messages": self.store.total_messages,
                "cache_size": cache_size,
                "cache": self.cache.get_stats(),
                "matcher": self.store.matcher.get_stats(),
                "scorer": self.executor.scorer.get_stats(),
            }

        stats.update(self.metrics.snapshot())
        return stats

    def clear_session(self, session_id: str) -> None:
        """Drop a session's index, messages and cached results."""
        self.store.clear_session(session_id)
        track_cache_eviction("invalidated", self.cache.invalidate_session(session_id))
        track_index_operation("clear", True, len(self.store))
        logger.info("Cleared session", session_id=session_id)

    def destroy(self) -> None:
        """Stop the cache sweeper and release all per-session state."""
        if self._destroyed:
            return

        self.sweeper.stop()
        self.store.clear()
        self.cache.clear()
        self._destroyed = True
        track_index_operation("destroy", True, 0)
        update_cache_size(0)
        logger.info("Message search engine destroyed")

    def _coerce_options(self, options: OptionsInput) -> SearchOptions:
        if options is None:
            return SearchOptions()
        if isinstance(options, SearchOptions):
            return options
        try:
            return SearchOptions.model_validate(dict(options))
        except (ValidationError, TypeError, ValueError) as e:
            raise ValidationException("options", options, str(e)) from e

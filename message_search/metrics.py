"""
Metrics for the message search engine.

Tracks search counts, latency and cache efficiency per engine, and mirrors
every event to Prometheus collectors for process-wide scraping.
"""

from dataclasses import asdict, dataclass

from prometheus_client import Counter, Gauge, Histogram

# Search metrics
search_queries_total = Counter(
    "message_search_queries_total", "Total executed message searches", ["status"]
)

search_query_duration_seconds = Histogram(
    "message_search_query_duration_seconds",
    "Message search duration in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

search_results_per_query = Histogram(
    "message_search_results_per_query",
    "Number of matches per search before pagination",
    buckets=(0, 1, 5, 10, 25, 50, 100, 500),
)

# Cache metrics
search_cache_hits_total = Counter("message_search_cache_hits_total", "Total cache hits")

search_cache_misses_total = Counter(
    "message_search_cache_misses_total", "Total cache misses"
)

search_cache_size = Gauge("message_search_cache_size", "Current cache size in entries")

search_cache_evictions_total = Counter(
    "message_search_cache_evictions_total", "Total cache entries removed", ["reason"]
)

# Index metrics
indexed_sessions = Gauge("message_search_indexed_sessions", "Sessions with an index")

index_operations_total = Counter(
    "message_search_index_operations_total",
    "Total index operations",
    ["operation", "status"],
)


def track_search_query(success: bool, duration: float, result_count: int = 0):
    """Track search query metrics (duration in seconds)."""
    status = "success" if success else "failure"
    search_queries_total.labels(status=status).inc()
    search_query_duration_seconds.observe(duration)
    if success:
        search_results_per_query.observe(result_count)


def track_cache_hit():
    search_cache_hits_total.inc()


def track_cache_miss():
    search_cache_misses_total.inc()


def update_cache_size(size: int):
    search_cache_size.set(size)


def track_cache_eviction(reason: str, count: int = 1):
    """Track removed cache entries (reason: expired, invalidated, cleared)."""
    if count > 0:
        search_cache_evictions_total.labels(reason=reason).inc(count)


def track_index_operation(operation: str, success: bool, session_count: int):
    """Track an index/append/clear operation and the resulting session count."""
    status = "success" if success else "failure"
    index_operations_total.labels(operation=operation, status=status).inc()
    indexed_sessions.set(session_count)


@dataclass
class SearchMetrics:
    """Counters for one engine. Durations are in milliseconds."""

    searches_performed: int = 0
    total_search_time: float = 0.0
    average_search_time: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0


class MetricsCollector:
    """
    Collects search and cache metrics for one engine.

    Attributes:
        metrics: Raw counters
    """

    def __init__(self):
        self.metrics = SearchMetrics()

    def record_search(self, duration_ms: float, result_count: int = 0) -> None:
        """Record a completed (non-cached) search."""
        self.metrics.searches_performed += 1
        self.metrics.total_search_time += duration_ms
        self.metrics.average_search_time = (
            self.metrics.total_search_time / self.metrics.searches_performed
        )
        track_search_query(True, duration_ms / 1000.0, result_count)

    def record_failure(self, duration_ms: float) -> None:
        track_search_query(False, duration_ms / 1000.0)

    def record_cache_hit(self) -> None:
        self.metrics.cache_hits += 1
        track_cache_hit()

    def record_cache_miss(self) -> None:
        self.metrics.cache_misses += 1
        track_cache_miss()

    @property
    def average_search_time(self) -> float:
        if self.metrics.searches_performed == 0:
            return 0.0
        return self.metrics.total_search_time / self.metrics.searches_performed

    @property
    def cache_hit_rate(self) -> float:
        lookups = self.metrics.cache_hits + self.metrics.cache_misses
        return self.metrics.cache_hits / lookups if lookups > 0 else 0.0

    def snapshot(self) -> dict:
        """
        Get a copy of the metrics.

        Returns:
            Dictionary with raw counters, average search time and hit rate
        """
        return {
            "metrics": asdict(self.metrics),
            "average_search_time": self.average_search_time,
            "cache_hit_rate": self.cache_hit_rate,
        }

    def reset(self) -> None:
        self.metrics = SearchMetrics()

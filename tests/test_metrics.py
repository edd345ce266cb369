"""
Tests for search metrics and Prometheus collectors.
"""

import pytest
from prometheus_client import REGISTRY

from message_search.metrics import (
    MetricsCollector,
    track_cache_eviction,
    track_cache_hit,
    track_index_operation,
    track_search_query,
    update_cache_size,
)


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricsCollector:
    """Test per-engine counters."""

    def test_initial_state(self):
        collector = MetricsCollector()

        assert collector.average_search_time == 0.0
        assert collector.cache_hit_rate == 0.0
        assert collector.metrics.searches_performed == 0

    def test_record_search(self):
        collector = MetricsCollector()

        collector.record_search(10.0, result_count=3)
        collector.record_search(20.0)

        assert collector.metrics.searches_performed == 2
        assert collector.metrics.total_search_time == pytest.approx(30.0)
        assert collector.metrics.average_search_time == pytest.approx(15.0)
        assert collector.average_search_time == pytest.approx(15.0)

    def test_failure_not_counted_as_search(self):
        collector = MetricsCollector()

        collector.record_failure(5.0)

        assert collector.metrics.searches_performed == 0

    def test_cache_hit_rate(self):
        collector = MetricsCollector()

        collector.record_cache_hit()
        collector.record_cache_miss()
        collector.record_cache_miss()
        collector.record_cache_miss()

        assert collector.cache_hit_rate == pytest.approx(0.25)

    def test_snapshot_is_a_copy(self):
        collector = MetricsCollector()
        collector.record_search(4.0)

        snapshot = collector.snapshot()
        collector.record_search(8.0)

        assert snapshot["metrics"]["searches_performed"] == 1
        assert snapshot["average_search_time"] == pytest.approx(4.0)
        assert snapshot["cache_hit_rate"] == 0.0

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_search(4.0)
        collector.record_cache_hit()

        collector.reset()

        assert collector.snapshot()["metrics"] == {
            "searches_performed": 0,
            "total_search_time": 0.0,
            "average_search_time": 0.0,
            "cache_hits": 0,
            "cache_misses": 0,
        }


class TestPrometheusTracking:
    """Test the process-wide collectors."""

    def test_track_search_query(self):
        before = _sample("message_search_queries_total", {"status": "success"})

        track_search_query(True, 0.002, result_count=4)

        assert _sample("message_search_queries_total", {"status": "success"}) == before + 1

    def test_track_failed_query(self):
        before = _sample("message_search_queries_total", {"status": "failure"})

        MetricsCollector().record_failure(3.0)

        assert _sample("message_search_queries_total", {"status": "failure"}) == before + 1

    def test_track_cache_hit(self):
        before = _sample("message_search_cache_hits_total")

        track_cache_hit()

        assert _sample("message_search_cache_hits_total") == before + 1

    def test_track_cache_eviction(self):
        labels = {"reason": "expired"}
        before = _sample("message_search_cache_evictions_total", labels)

        track_cache_eviction("expired", 3)
        track_cache_eviction("expired", 0)

        assert _sample("message_search_cache_evictions_total", labels) == before + 3

    def test_update_cache_size(self):
        update_cache_size(7)
        assert _sample("message_search_cache_size") == 7

    def test_track_index_operation(self):
        labels = {"operation": "index", "status": "failure"}
        before = _sample("message_search_index_operations_total", labels)

        track_index_operation("index", False, 4)

        assert _sample("message_search_index_operations_total", labels) == before + 1
        assert _sample("message_search_indexed_sessions") == 4

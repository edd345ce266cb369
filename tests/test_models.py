"""
Tests for search options and filters.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from message_search.domain.models import SearchFilters, SearchOptions, SortBy, SortOrder
from message_search.search.message_normalizer import normalize_message

UTC = timezone.utc


def _message(**fields):
    return normalize_message({"id": "m", **fields})


class TestSearchOptions:
    """Test option parsing."""

    def test_defaults(self):
        options = SearchOptions()

        assert options.limit == 50
        assert options.offset == 0
        assert options.include_content is True
        assert options.include_metadata is True
        assert options.enable_highlighting is None
        assert options.sort_by == SortBy.RELEVANCE
        assert options.sort_order == SortOrder.DESC
        assert options.filters.is_empty

    def test_camel_case_keys(self):
        options = SearchOptions.model_validate(
            {
                "limit": 10,
                "sortBy": "date",
                "sortOrder": "asc",
                "includeContent": False,
                "enableHighlighting": False,
                "filters": {"hasAttachment": True, "dateFrom": "2024-01-01T00:00:00Z"},
            }
        )

        assert options.limit == 10
        assert options.sort_by == SortBy.DATE
        assert options.sort_order == SortOrder.ASC
        assert options.include_content is False
        assert options.enable_highlighting is False
        assert options.filters.has_attachment is True
        assert options.filters.date_from == datetime(2024, 1, 1, tzinfo=UTC)

    def test_snake_case_keys(self):
        options = SearchOptions(sort_by="score", include_metadata=False)

        assert options.sort_by == SortBy.SCORE
        assert options.include_metadata is False

    def test_unknown_keys_ignored(self):
        assert SearchOptions.model_validate({"threshold": 0.9}).limit == 50

    @pytest.mark.parametrize("data", [{"limit": 0}, {"offset": -1}, {"sortBy": "name"}])
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            SearchOptions.model_validate(data)


class TestSearchFilters:
    """Test post-match filtering."""

    def test_empty_accepts_everything(self):
        filters = SearchFilters()

        assert filters.is_empty
        assert filters.accepts(_message())

    def test_sender_substring_case_insensitive(self):
        filters = SearchFilters(sender="ALI")

        assert filters.accepts(_message(sender="alice"))
        assert not filters.accepts(_message(sender="bob"))

    def test_type_exact(self):
        filters = SearchFilters(type="system")

        assert filters.accepts(_message(type="system"))
        assert not filters.accepts(_message(type="systems"))

    def test_date_bounds_inclusive(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = datetime(2024, 1, 31, tzinfo=UTC)
        filters = SearchFilters(date_from=start, date_to=end)

        assert filters.accepts(_message(timestamp=start))
        assert filters.accepts(_message(timestamp=end))
        assert not filters.accepts(_message(timestamp="2023-12-31T23:59:59Z"))
        assert not filters.accepts(_message(timestamp="2024-02-01T00:00:00Z"))

    def test_numeric_timestamps(self):
        """Test epoch seconds and milliseconds compare against date bounds."""
        filters = SearchFilters.date_range(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 2))

        assert filters.accepts(_message(timestamp=1704103200))
        assert filters.accepts(_message(timestamp=1704103200000))
        assert not filters.accepts(_message(timestamp=1706745600000))
        assert not filters.accepts(_message(timestamp=1703980800))

    def test_unreadable_timestamp_fails_date_filter(self):
        filters = SearchFilters(date_from=datetime(2000, 1, 1))

        assert not filters.accepts(_message(timestamp="Mon, 01 Jan 2024 10:00:00 GMT"))

    def test_undated_fails_date_filter(self):
        assert not SearchFilters(date_from=datetime(2024, 1, 1)).accepts(_message())

    def test_naive_bounds_are_utc(self):
        filters = SearchFilters(date_to=datetime(2024, 1, 1, 12, 0))

        assert filters.date_to.tzinfo == UTC
        assert filters.accepts(_message(timestamp="2024-01-01T12:00:00Z"))

    def test_has_attachment(self):
        filters = SearchFilters(has_attachment=True)

        assert filters.accepts(_message(attachment={"name": "a.txt"}))
        assert not filters.accepts(_message(type="file"))

    def test_all_filters_must_pass(self):
        filters = SearchFilters(sender="alice", type="system")

        assert not filters.accepts(_message(sender="alice"))
        assert filters.accepts(_message(sender="alice", type="system"))


class TestFilterBuilders:
    """Test the prebuilt filter constructors."""

    def test_date_range(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)

        filters = SearchFilters.date_range(start)

        assert filters.date_from == start
        assert filters.date_to is None

    def test_by_sender(self):
        assert SearchFilters.by_sender("bob").sender == "bob"

    def test_attachments_only(self):
        assert SearchFilters.attachments_only().has_attachment is True

    def test_from_criteria(self):
        filters = SearchFilters.from_criteria(sender="alice", message_type="file", has_attachment=True)

        assert filters == SearchFilters(sender="alice", type="file", has_attachment=True)

    def test_from_criteria_blank_values_unset(self):
        assert SearchFilters.from_criteria(sender="", message_type="").is_empty

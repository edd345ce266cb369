"""
Tests for message normalization.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from message_search.domain.exceptions import ProcessingException
from message_search.search.message_normalizer import (
    build_searchable_content,
    normalize_message,
    parse_timestamp,
)


class TestDefaults:
    """Test fallbacks for missing fields."""

    def test_minimal_message(self):
        """Test a message with only an id."""
        message = normalize_message({"id": 1})

        assert message.id == 1
        assert message.content == ""
        assert message.sender == "unknown"
        assert message.timestamp is None
        assert message.type == "message"
        assert message.metadata == {}
        assert message.searchable_content == ""

    def test_sender_falls_back_to_role(self):
        """Test role is used when sender is missing."""
        message = normalize_message({"id": "a", "role": "assistant"})
        assert message.sender == "assistant"

    def test_sender_preferred_over_role(self):
        """Test sender wins over role."""
        message = normalize_message({"id": "a", "sender": "alice", "role": "user"})
        assert message.sender == "alice"

    def test_timestamp_falls_back_to_created_at(self):
        """Test createdAt is used when timestamp is missing."""
        message = normalize_message({"id": "a", "createdAt": "2024-03-01T08:00:00Z"})
        assert message.timestamp == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

    def test_missing_id_raises(self):
        """Test a record without id is rejected."""
        with pytest.raises(ProcessingException):
            normalize_message({"content": "no id"})

    def test_invalid_timestamp_leaves_message_undated(self):
        """Test an unparseable timestamp keeps the message without a date."""
        message = normalize_message({"id": "a", "content": "hi", "timestamp": "not a date"})

        assert message.timestamp is None
        assert message.content == "hi"

    def test_http_date_string_leaves_message_undated(self):
        message = normalize_message({"id": "a", "timestamp": "Mon, 01 Jan 2024 10:00:00 GMT"})
        assert message.timestamp is None


class TestMetadata:
    """Test metadata extraction."""

    def test_attachment(self):
        """Test attachment contributes file name/type and the file flag."""
        message = normalize_message(
            {"id": "a", "attachment": {"name": "report.pdf", "type": "application/pdf"}}
        )

        assert message.metadata["file"] == "report.pdf"
        assert message.metadata["file_type"] == "application/pdf"
        assert message.metadata["file_operation"] is True
        assert message.has_attachment is True

    def test_command_tool_project_copied(self):
        """Test command, tool and project are copied verbatim."""
        message = normalize_message(
            {"id": "a", "command": "ls -la", "tool": "bash", "project": "Billing"}
        )

        assert message.metadata == {"command": "ls -la", "tool": "bash", "project": "Billing"}

    def test_system_message_flag(self):
        """Test system type sets the system flag."""
        message = normalize_message({"id": "a", "type": "system"})
        assert message.metadata["system_message"] is True

    def test_file_type_sets_file_operation(self):
        """Test file type sets the file operation flag without attachment."""
        message = normalize_message({"id": "a", "type": "file"})

        assert message.metadata["file_operation"] is True
        assert message.has_attachment is False


class TestSearchableContent:
    """Test searchable content construction."""

    def test_lowercased_join(self):
        """Test content and textual metadata are joined and lowercased."""
        message = normalize_message(
            {
                "id": "a",
                "content": "Run It",
                "command": "Make Build",
                "attachment": {"name": "Makefile"},
            }
        )

        assert message.searchable_content == "run it makefile make build"

    def test_flags_not_included(self):
        """Test boolean flags are not treated as text."""
        assert build_searchable_content("Hi", {"system_message": True}) == "hi"

    def test_empty_values_skipped(self):
        """Test empty values leave no extra separators."""
        assert build_searchable_content("", {"file": "", "tool": "git"}) == "git"


class TestTimestamps:
    """Test timestamp parsing."""

    def test_naive_datetime_assumed_utc(self):
        """Test naive datetimes become UTC."""
        parsed = parse_timestamp(datetime(2024, 1, 1, 12, 0))
        assert parsed.tzinfo == timezone.utc

    def test_epoch_seconds(self):
        """Test small numbers are epoch seconds."""
        assert parse_timestamp(0.0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(1704103200) == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_epoch_milliseconds(self):
        """Test Date.now() style values are epoch milliseconds."""
        parsed = parse_timestamp(1704103200000)
        assert parsed == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_epoch_milliseconds_with_fraction(self):
        parsed = parse_timestamp(1704103200500.0)
        assert parsed == datetime(2024, 1, 1, 10, 0, 0, 500000, tzinfo=timezone.utc)

    def test_numeric_timestamp_on_message(self):
        """Test numeric timestamps survive normalization."""
        message = normalize_message({"id": "a", "createdAt": 1704103200000})
        assert message.timestamp == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["not a date", True, object()])
    def test_unparseable_raises(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)

    def test_iso_with_offset(self):
        """Test ISO strings with offsets keep their offset."""
        parsed = parse_timestamp("2024-01-01T12:00:00+02:00")
        assert parsed == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_empty_is_none(self):
        """Test empty values parse to None."""
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


class TestAttributeRecords:
    """Test records exposing attributes instead of keys."""

    def test_dataclass_record(self):
        """Test a dataclass record is normalized like a mapping."""

        @dataclass
        class ChatMessage:
            id: str
            content: str
            role: str

        message = normalize_message(ChatMessage(id="x", content="Hello", role="user"))

        assert message.id == "x"
        assert message.sender == "user"
        assert message.searchable_content == "hello"

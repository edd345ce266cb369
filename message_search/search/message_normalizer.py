"""
Message normalization.

Converts raw chat message records of heterogeneous shape into
``IndexedMessage`` entities ready for indexing.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from ..domain.entities import IndexedMessage
from ..domain.exceptions import ProcessingException

logger = logging.getLogger(__name__)

UNKNOWN_SENDER = "unknown"
DEFAULT_MESSAGE_TYPE = "message"

# Fallback names for the creation time of a message
CREATED_AT_FIELDS = ("createdAt", "created_at")

# Epoch values at or above this magnitude are milliseconds (year 5138 in seconds)
EPOCH_MILLISECONDS_THRESHOLD = 1e11


def _field(record: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a message timestamp into a timezone-aware datetime.

    Accepts datetimes (naive values are assumed UTC), ISO-8601 strings
    (including a trailing ``Z``) and epoch numbers. Numbers below 1e11 are
    seconds, larger ones milliseconds (``Date.now()`` style).

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= EPOCH_MILLISECONDS_THRESHOLD else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _build_metadata(record: Any, message_type: str) -> dict:
    metadata: dict = {}

    attachment = _field(record, "attachment")
    if attachment:
        metadata["file"] = _field(attachment, "name") or ""
        metadata["file_type"] = _field(attachment, "type") or ""

    for name in ("command", "tool", "project"):
        value = _field(record, name)
        if value:
            metadata[name] = value

    if message_type == "system":
        metadata["system_message"] = True

    if message_type == "file" or attachment:
        metadata["file_operation"] = True

    return metadata


def build_searchable_content(content: str, metadata: dict) -> str:
    """Join content and every non-empty textual metadata value, lowercased."""
    parts = [content] + [value for value in metadata.values() if isinstance(value, str)]
    return " ".join(part for part in parts if part).lower()


def normalize_message(record: Any) -> IndexedMessage:
    """
    Normalize a raw message record.

    Args:
        record: Mapping (or attribute object) with at least an ``id``

    Returns:
        IndexedMessage built from the record

    Raises:
        ProcessingException: If the record has no id

    An unreadable timestamp does not reject the record; the message is
    indexed without one.
    """
    message_id = _field(record, "id")
    if message_id is None:
        raise ProcessingException("normalization", "message has no id")

    content = _field(record, "content") or ""
    if not isinstance(content, str):
        content = str(content)

    sender = _field(record, "sender") or _field(record, "role") or UNKNOWN_SENDER
    message_type = _field(record, "type") or DEFAULT_MESSAGE_TYPE

    raw_timestamp = _field(record, "timestamp")
    if not raw_timestamp:
        for name in CREATED_AT_FIELDS:
            raw_timestamp = _field(record, name)
            if raw_timestamp:
                break

    try:
        timestamp = parse_timestamp(raw_timestamp)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        # Kept as undated: fails date filters, sorts as oldest
        logger.debug(f"Message {message_id} has unreadable timestamp {raw_timestamp!r}: {e}")
        timestamp = None

    metadata = _build_metadata(record, message_type)

    return IndexedMessage(
        id=message_id,
        content=content,
        sender=str(sender),
        timestamp=timestamp,
        type=str(message_type),
        metadata=metadata,
        searchable_content=build_searchable_content(content, metadata),
    )

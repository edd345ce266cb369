"""
Search option models and validation.

Pydantic models describing the options accepted by a search call. Both
snake_case and camelCase keys are accepted so adapters can forward their
option objects unchanged.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .entities import IndexedMessage

# Pagination defaults
DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0


class SortBy(str, Enum):
    """Orderings supported for search results."""

    RELEVANCE = "relevance"
    DATE = "date"
    SCORE = "score"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SearchFilters(BaseModel):
    """
    Post-match filters. Every set filter must pass for a result to survive.

    Attributes:
        sender: Case-insensitive substring of the sender
        type: Exact message type
        date_from: Inclusive lower bound on the message timestamp
        date_to: Inclusive upper bound on the message timestamp
        has_attachment: Require a named file attachment
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    sender: Optional[str] = None
    type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    has_attachment: bool = False

    @field_validator("date_from", "date_to")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive bounds as UTC so they compare with message timestamps."""
        return _as_utc(v)

    @property
    def is_empty(self) -> bool:
        return not (
            self.sender or self.type or self.date_from or self.date_to or self.has_attachment
        )

    def accepts(self, message: IndexedMessage) -> bool:
        """Check whether a message passes every configured filter."""
        if self.sender and self.sender.lower() not in message.sender.lower():
            return False

        if self.type and message.type != self.type:
            return False

        if self.date_from or self.date_to:
            # Undated messages cannot be placed inside a date range
            if message.timestamp is None:
                return False
            if self.date_from and message.timestamp < self.date_from:
                return False
            if self.date_to and message.timestamp > self.date_to:
                return False

        if self.has_attachment and not message.has_attachment:
            return False

        return True

    @classmethod
    def date_range(
        cls, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> "SearchFilters":
        """Filter on an inclusive date range; either bound may be omitted."""
        return cls(date_from=start, date_to=end)

    @classmethod
    def by_sender(cls, sender: str) -> "SearchFilters":
        return cls(sender=sender)

    @classmethod
    def attachments_only(cls) -> "SearchFilters":
        return cls(has_attachment=True)

    @classmethod
    def from_criteria(
        cls,
        sender: Optional[str] = None,
        message_type: Optional[str] = None,
        has_attachment: bool = False,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> "SearchFilters":
        """
        Build a composite filter from advanced-search criteria.

        Empty criteria are left unset, so ``from_criteria()`` matches everything.
        """
        return cls(
            sender=sender or None,
            type=message_type or None,
            has_attachment=bool(has_attachment),
            date_from=date_from,
            date_to=date_to,
        )


class SearchOptions(BaseModel):
    """
    Options for a single search call.

    ``enable_highlighting`` left as None falls back to the engine setting.
    Only ``limit`` and ``sort_by`` take part in the result cache key.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    limit: int = Field(default=DEFAULT_LIMIT, ge=1)
    offset: int = Field(default=DEFAULT_OFFSET, ge=0)
    include_content: bool = True
    include_metadata: bool = True
    enable_highlighting: Optional[bool] = None
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    filters: SearchFilters = Field(default_factory=SearchFilters)

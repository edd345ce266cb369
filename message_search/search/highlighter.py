"""
Highlight snippet construction.

Builds bounded context windows around content matches for presentation
layers to mark up.
"""

from typing import Iterable, List

from ..domain.entities import FieldMatch, Highlight

DEFAULT_CONTEXT_CHARS = 50
CONTENT_KEY = "content"


class HighlightBuilder:
    """Extracts a snippet around every content match range."""

    def __init__(self, context_chars: int = DEFAULT_CONTEXT_CHARS):
        self.context_chars = context_chars

    def build(self, content: str, matches: Iterable[FieldMatch]) -> List[Highlight]:
        """
        Build highlights for the content-field matches of one message.

        Each range produces its own highlight; overlapping ranges are not merged.
        ``start_index`` and ``end_index`` are absolute offsets of the snippet
        inside ``content`` (``content[start_index:end_index] == snippet``), not
        an end offset relative to the snippet as some UI adapters expect.

        Args:
            content: Original message content
            matches: Field matches of the message

        Returns:
            Highlights in match order
        """
        if not content:
            return []

        highlights = []
        for match in matches:
            if match.key != CONTENT_KEY:
                continue
            for start, end in match.indices:
                start = max(0, min(start, len(content)))
                end = max(start, min(end, len(content)))
                window_start = max(0, start - self.context_chars)
                window_end = min(len(content), end + self.context_chars)

                highlights.append(
                    Highlight(
                        snippet=content[window_start:window_end],
                        start_index=window_start,
                        end_index=window_end,
                        original_start=start,
                        original_end=end,
                    )
                )
        return highlights

"""
Query normalization.

Cleans raw user queries and rewrites them into the pattern syntax
understood by ``MessageIndex``.
"""

import re

MIN_QUERY_LENGTH = 2

# Operator tokens removed from the query text
OPERATOR_PREFIXES = ("file:", "sender:")

QUOTED_PHRASE = re.compile(r'"([^"]+)"')


class QueryNormalizer:
    """
    Rewrites raw queries into match patterns.

    - Trims surrounding whitespace
    - Removes ``file:`` and ``sender:`` operator tokens
    - Rewrites ``"exact phrase"`` into the matcher's ``'exact phrase'`` syntax
    """

    def __init__(self, min_query_length: int = MIN_QUERY_LENGTH):
        self.min_query_length = min_query_length

    def is_searchable(self, query: str) -> bool:
        """Check that a raw query is long enough to search for."""
        return bool(query) and len(query.strip()) >= self.min_query_length

    def normalize(self, query: str) -> str:
        """
        Normalize a raw query.

        Examples:
            '  hello  ' -> 'hello'
            'file:report' -> 'report'
            'say "hello world"' -> "say 'hello world'"
        """
        processed = (query or "").strip()

        # TODO: translate the operators into SearchFilters once the intended
        # semantics of file:/sender: are settled; today they are only removed
        for prefix in OPERATOR_PREFIXES:
            processed = processed.replace(prefix, "")

        return QUOTED_PHRASE.sub(lambda m: f"'{m.group(1)}'", processed)

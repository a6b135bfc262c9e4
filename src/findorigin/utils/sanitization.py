"""Input sanitization for text sent to external APIs."""

import re

MAX_QUERY_LENGTH = 500


def sanitize_query(query: str) -> str:
    """Sanitize a search query requested by the model.

    Removes control characters and angle brackets while preserving
    useful punctuation for search queries.

    Args:
        query: Raw query string.

    Returns:
        Sanitized query string (max 500 characters).
    """
    if not isinstance(query, str):
        return ""
    q = query.strip()
    q = re.sub(r"[\x00-\x1f<>]", "", q)
    return q[:MAX_QUERY_LENGTH].strip()

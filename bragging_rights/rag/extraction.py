"""
Response Extraction
===================

Pulls quoted sayings out of free-form model output and scrubs essays
before they are indexed.
"""

import re

# First double-quoted segment
QUOTED_PATTERN = re.compile(r'"(.*?)"')

_EDGE_PUNCTUATION = " \t\n\r\"'.,;:!?"


def extract_quoted(text: str | None) -> str | None:
    """
    Extract the first double-quoted segment from model output.

    Examples:
        >>> extract_quoted('The answer is "Honesty is the best policy."')
        'Honesty is the best policy'
        >>> extract_quoted('"Honesty is the best policy".')
        'Honesty is the best policy'
        >>> extract_quoted("no quotes here") is None
        True

    Args:
        text: Raw response text

    Returns:
        The quoted content, or None when nothing (non-empty) is quoted
    """
    if not text:
        return None

    match = QUOTED_PATTERN.search(text)
    if match is None:
        return None

    content = match.group(1).strip()
    # one trailing period inside the quotes is not part of the saying
    content = content.removesuffix(".").rstrip()
    return content or None


def scrub_essay(essay: str, saying: str) -> str:
    """
    Remove every literal occurrence of the saying and every double quote.

    The saying is matched literally, never as a regular expression.
    """
    if saying:
        essay = essay.replace(saying, "")
    return essay.replace('"', "")


def normalize_saying(text: str) -> str:
    """Lower-case, collapse whitespace and trim surrounding punctuation."""
    return " ".join(text.split()).strip(_EDGE_PUNCTUATION).lower()


def sayings_match(left: str | None, right: str | None) -> bool:
    """Compare two sayings ignoring case, spacing and edge punctuation."""
    if not left or not right:
        return False
    return normalize_saying(left) == normalize_saying(right)

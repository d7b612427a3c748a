"""
Text normalization and fingerprinting used as cache and dedup keys.

Two normalizations exist on purpose:

* ``strip_markup`` produces the client cache key input (markup removed,
  whitespace collapsed, case preserved).
* ``normalize_query`` produces the server dedup key input (lowercased,
  whitespace collapsed).

Client and server fingerprints are never compared with each other, so the
difference is a compatibility boundary rather than a bug.
"""
import html
import re
from typing import Iterable

TAG_PATTERN = re.compile(r"<[^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_markup(content: str) -> str:
    """
    Reduce editor markup to plain text.

    Tags are replaced by a space so adjacent block contents don't fuse
    into a single word. Character entities are decoded after the tags
    are gone.
    """
    text = html.unescape(TAG_PATTERN.sub(" ", content))
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def normalize_query(text: str) -> str:
    """Lowercase, trim and collapse whitespace for recent-query dedup."""
    return WHITESPACE_PATTERN.sub(" ", text.lower().strip())


def fingerprint(text: str) -> str:
    """
    32-bit rolling hash of text, rendered as 8 hex digits.

    Collisions are tolerated: two texts with the same fingerprint share a
    cached result.

    Args:
        text: Already-normalized text

    Returns:
        Fingerprint string (e.g. '1f3a09bc')
    """
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return f"{h:08x}"


def ignore_fingerprint(keys: Iterable[tuple[str, str]]) -> str:
    """
    Order-independent fingerprint over (token, type) pairs of ignore rules.

    Used by the scheduler to notice that the ignore list changed since the
    last check.
    """
    return "|".join(sorted(f"{token}:{issue_type}" for token, issue_type in keys))

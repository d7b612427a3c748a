"""
Locate an issue in the live document and apply corrections.

Issue offsets go stale as soon as the document is edited, so an issue is
located by trying three strategies in order:

1. Marker - the decoration placed when the issue was displayed.
2. Exact - first occurrence of the trimmed token in any text node.
3. Fuzzy - words of the token, longest first, extended by a small window
   of surrounding context, searched within each text node.

The first strategy that yields a span wins. When none does, the document
is left untouched and PositionNotFoundError is raised.
"""
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from proofline.client.document import Document, Span
from proofline.client.errors import PositionNotFoundError
from proofline.schemas.correction import Issue
from proofline.utils.logger import get_logger

logger = get_logger("client.resolver")

FUZZY_CONTEXT_CHARS = 15
FUZZY_MIN_TOKEN_LENGTH = 4
FUZZY_MIN_WORD_LENGTH = 3

TIER_MARKER = "marker"
TIER_EXACT = "exact"
TIER_FUZZY = "fuzzy"


@dataclass(frozen=True)
class Resolution:
    span: Span
    tier: str


def find_marker_span(document: Document, issue: Issue) -> Optional[Span]:
    marker = document.marker_for(issue.offset)
    if marker is None:
        return None
    return marker.span


def iter_exact_spans(document: Document, token: str) -> Iterator[Span]:
    """Every occurrence of the trimmed token, in document order."""
    needle = token.strip()
    if not needle:
        return
    for node in document.text_nodes():
        index = node.text.find(needle)
        while index != -1:
            start = node.pos + index
            yield Span(start, start + len(needle))
            index = node.text.find(needle, index + len(needle))


def find_exact_span(document: Document, token: str) -> Optional[Span]:
    """First occurrence of the trimmed token inside a single text node."""
    return next(iter_exact_spans(document, token), None)


def find_fuzzy_span(document: Document, token: str) -> Optional[Span]:
    """
    Search for the words of the token, longest first, inside each text node.

    The match is extended by up to FUZZY_CONTEXT_CHARS on each side,
    clamped to the node, so the replaced span covers the surrounding
    context the token was flagged in.
    """
    words = [w for w in token.split() if len(w) >= FUZZY_MIN_WORD_LENGTH]
    words.sort(key=len, reverse=True)

    for word in words:
        for node in document.text_nodes():
            index = node.text.find(word)
            if index == -1:
                continue
            start = max(0, index - FUZZY_CONTEXT_CHARS)
            end = min(len(node.text), index + len(word) + FUZZY_CONTEXT_CHARS)
            return Span(node.pos + start, node.pos + end)
    return None


def resolve(document: Document, issue: Issue) -> Resolution:
    """
    Find the document span for an issue.

    Raises:
        PositionNotFoundError: If no strategy locates the issue
    """
    span = find_marker_span(document, issue)
    if span is not None:
        return Resolution(span, TIER_MARKER)

    span = find_exact_span(document, issue.token)
    if span is not None:
        return Resolution(span, TIER_EXACT)

    if len(issue.token) >= FUZZY_MIN_TOKEN_LENGTH:
        span = find_fuzzy_span(document, issue.token)
        if span is not None:
            return Resolution(span, TIER_FUZZY)

    raise PositionNotFoundError(issue.token, issue.offset)


def apply_correction(document: Document, issue: Issue, replacement: str) -> Resolution:
    """
    Replace the issue's span with the chosen suggestion in one edit.

    Returns:
        Resolution describing the span that was replaced and how it was found

    Raises:
        PositionNotFoundError: If the issue cannot be located
    """
    resolution = resolve(document, issue)
    document.replace_range(resolution.span.start, resolution.span.end, replacement)
    logger.info(
        "Correction applied",
        token=issue.token,
        offset=issue.offset,
        tier=resolution.tier,
        start=resolution.span.start,
        end=resolution.span.end
    )
    return resolution


def decorate_issues(document: Document, issues: Iterable[Issue]) -> int:
    """
    Replace the document's markers with one per locatable issue.

    Repeated tokens are matched to successive occurrences in document order.

    Returns:
        Number of markers placed
    """
    document.clear_markers()
    used = set()
    placed = 0
    for issue in sorted(issues, key=lambda i: i.offset):
        span = next((s for s in iter_exact_spans(document, issue.token) if s not in used), None)
        if span is None:
            continue
        used.add(span)
        document.mark(issue.offset, span.start, span.end)
        placed += 1
    return placed

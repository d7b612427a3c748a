"""
Minimal structured document used by the correction session.

Positions follow the usual rich-text editor convention: every paragraph
opens and closes with a boundary token, so the first character of the
first paragraph sits at position 1 and the boundary between two
paragraphs costs two positions. Offsets reported by the correction
service refer to the markup-stripped plain text and are NOT document
positions; only markers and text searches yield positions.
"""
import html
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from proofline.utils.logger import get_logger

logger = get_logger("client.document")


@dataclass(frozen=True)
class Span:
    """Half-open document range [start, end)."""
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class TextNode:
    """A paragraph's text and the document position of its first character."""
    text: str
    pos: int

    @property
    def end(self) -> int:
        return self.pos + len(self.text)


@dataclass
class Marker:
    """Visual decoration for an issue, keyed by the issue's offset."""
    offset: int
    start: int
    end: int

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)


class Document:
    """
    Paragraph-based document with position markers.

    Edits go through replace_range, which swaps the text and remaps the
    markers in a single step; change listeners only ever see the
    finished edit.
    """

    def __init__(self, paragraphs: Iterable[str] = ()):
        self._paragraphs: List[str] = list(paragraphs)
        self.markers: Dict[int, Marker] = {}
        self.version = 0
        self._listeners: List[Callable[["Document"], None]] = []

    @classmethod
    def from_text(cls, text: str) -> "Document":
        """Build a document from text with blank-line separated paragraphs."""
        return cls(part.strip() for part in text.split("\n\n") if part.strip())

    @property
    def paragraphs(self) -> List[str]:
        return list(self._paragraphs)

    @property
    def size(self) -> int:
        return sum(len(p) + 2 for p in self._paragraphs)

    def text_nodes(self) -> Iterator[TextNode]:
        """Yield non-empty text nodes in document order."""
        pos = 0
        for paragraph in self._paragraphs:
            if paragraph:
                yield TextNode(paragraph, pos + 1)
            pos += len(paragraph) + 2

    def text_between(self, start: int, end: int) -> str:
        """Text covered by [start, end); paragraph boundaries read as a space."""
        pieces = []
        for node in self.text_nodes():
            lo, hi = max(start, node.pos), min(end, node.end)
            if lo < hi:
                pieces.append(node.text[lo - node.pos:hi - node.pos])
        return " ".join(pieces)

    def to_html(self) -> str:
        return "".join(f"<p>{html.escape(p, quote=False)}</p>" for p in self._paragraphs)

    def add_listener(self, callback: Callable[["Document"], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["Document"], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def set_paragraphs(self, paragraphs: Iterable[str]) -> None:
        """Replace the whole content, as a user edit would; markers are dropped."""
        self._paragraphs = list(paragraphs)
        self.markers.clear()
        self._changed()

    def replace_range(self, start: int, end: int, text: str) -> Span:
        """
        Replace [start, end) with text as one atomic edit.

        Args:
            start: Start position (inclusive)
            end: End position (exclusive)
            text: Replacement text

        Returns:
            Span now covered by the replacement

        Raises:
            ValueError: If the range is empty, reversed or crosses a
                paragraph boundary
        """
        if start >= end:
            raise ValueError(f"Invalid range [{start}, {end})")

        pos = 0
        for index, paragraph in enumerate(self._paragraphs):
            node_start = pos + 1
            node_end = node_start + len(paragraph)
            if node_start <= start and end <= node_end:
                local_start, local_end = start - node_start, end - node_start
                updated = paragraph[:local_start] + text + paragraph[local_end:]
                delta = len(text) - (end - start)
                self._paragraphs[index] = updated
                self._map_markers(start, end, delta)
                logger.debug(
                    "Range replaced",
                    start=start,
                    end=end,
                    replacement_length=len(text)
                )
                self._changed()
                return Span(start, start + len(text))
            pos = node_end + 1

        raise ValueError(f"Range [{start}, {end}) is not inside a single text node")

    def mark(self, offset: int, start: int, end: int) -> Marker:
        marker = Marker(offset=offset, start=start, end=end)
        self.markers[offset] = marker
        return marker

    def clear_markers(self) -> None:
        self.markers.clear()

    def marker_for(self, offset: int) -> Optional[Marker]:
        return self.markers.get(offset)

    def _map_markers(self, start: int, end: int, delta: int) -> None:
        # Markers touching the edited range are dropped, later ones shift.
        for offset, marker in list(self.markers.items()):
            if marker.end <= start:
                continue
            if marker.start >= end:
                marker.start += delta
                marker.end += delta
            else:
                del self.markers[offset]

    def _changed(self) -> None:
        self.version += 1
        for callback in list(self._listeners):
            callback(self)

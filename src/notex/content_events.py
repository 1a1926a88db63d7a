"""Linear replay of a markup subtree.

Every later pass works on the flat event list rather than the tree: text
events carry the characters, open/close events carry the element structure.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from notex.dom import Element, Node, Text


class EventKind(Enum):
    TEXT = "text"
    OPEN = "tag-open"
    CLOSE = "tag-close"


@dataclass(frozen=True, slots=True)
class ContentEvent:
    """One step of a document-order replay: text, element open or element close."""

    kind: EventKind
    node: Node

    @property
    def text(self) -> str:
        """Characters of a text event (``""`` for open/close)."""
        if self.kind is EventKind.TEXT:
            assert isinstance(self.node, Text)
            return self.node.data
        return ""


def stream_content_events(root: Element) -> Iterator[ContentEvent]:
    """Yield the content events of *root*'s descendants, depth-first.

    *root* itself never appears.  An element without children closes right
    after it opens; after an element's last child the walk pops back through
    its ancestors, closing each one, until it finds a next sibling.
    """
    iterators: list[Iterator[Node]] = [iter(root.children)]
    open_elements: list[Element] = []

    while iterators:
        node = next(iterators[-1], None)
        if node is None:
            iterators.pop()
            if open_elements:
                yield ContentEvent(EventKind.CLOSE, open_elements.pop())
            continue

        if isinstance(node, Text):
            yield ContentEvent(EventKind.TEXT, node)
            continue

        assert isinstance(node, Element)
        yield ContentEvent(EventKind.OPEN, node)
        if node.children:
            open_elements.append(node)
            iterators.append(iter(node.children))
        else:
            yield ContentEvent(EventKind.CLOSE, node)


def get_content_events(root: Element) -> list[ContentEvent]:
    return list(stream_content_events(root))


def is_multiline(events: Sequence[ContentEvent]) -> bool:
    """True when any text event contains a line break."""
    return any("\n" in event.text for event in events)

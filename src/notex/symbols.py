"""Per-character symbol index over a code block's text nodes.

One ``Symbol`` per character present when the index is built.  A symbol keeps
pointing at whichever text node currently stores its character, so the index
space stays stable while tagging splits and rewraps nodes.

Two marker zones shape the symbols:

- inside an *ignore* element a symbol's value is a blank, hiding the text
  from pattern matching while keeping columns;
- inside a *no-color* element (only honoured within an ignore zone) a
  symbol is not colorable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from notex.content_events import ContentEvent, EventKind
from notex.dom import Element, Text

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_ATTRIBUTE = "data-ignore"
DEFAULT_NO_COLOR_ATTRIBUTE = "data-no-color"

# Stand-in value for characters inside an ignore zone
IGNORED_VALUE = " "


@dataclass(slots=True)
class Symbol:
    value: str
    node: Text
    position: int
    colorable: bool = True


def stream_symbols(
    events: Sequence[ContentEvent],
    *,
    ignore_attribute: str = DEFAULT_IGNORE_ATTRIBUTE,
    no_color_attribute: str = DEFAULT_NO_COLOR_ATTRIBUTE,
) -> Iterator[Symbol]:
    """Yield a symbol for every character of every text event."""
    ignore_node: Element | None = None
    no_color_node: Element | None = None

    for event in events:
        if event.kind is EventKind.OPEN:
            element = event.node
            assert isinstance(element, Element)
            if element.has_attribute(ignore_attribute):
                if ignore_node is None and no_color_node is None:
                    ignore_node = element
                else:
                    logger.warning(
                        "Ignoring nested %s marker on <%s>",
                        ignore_attribute,
                        element.tag,
                    )

            if element.has_attribute(no_color_attribute):
                if ignore_node is not None and no_color_node is None:
                    no_color_node = element
                elif no_color_node is not None:
                    logger.warning(
                        "Ignoring nested %s marker on <%s>",
                        no_color_attribute,
                        element.tag,
                    )
                else:
                    logger.warning(
                        "Ignoring %s marker on <%s> outside any %s zone",
                        no_color_attribute,
                        element.tag,
                        ignore_attribute,
                    )
            continue

        if event.kind is EventKind.CLOSE:
            if event.node is no_color_node:
                no_color_node = None
            if event.node is ignore_node:
                ignore_node = None
            continue

        node = event.node
        assert isinstance(node, Text)
        for position, symbol in enumerate(node.data):
            yield Symbol(
                value=symbol if ignore_node is None else IGNORED_VALUE,
                node=node,
                position=position,
                colorable=no_color_node is None,
            )


def build_symbols(
    events: Sequence[ContentEvent],
    *,
    ignore_attribute: str = DEFAULT_IGNORE_ATTRIBUTE,
    no_color_attribute: str = DEFAULT_NO_COLOR_ATTRIBUTE,
) -> list[Symbol]:
    return list(
        stream_symbols(
            events,
            ignore_attribute=ignore_attribute,
            no_color_attribute=no_color_attribute,
        )
    )

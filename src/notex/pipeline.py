"""Per-block and per-document drivers.

For every code element:

1. linearize its content;
2. if it spans several lines, mark it for block-level pre-wrapped rendering
   and strip the shared indentation;
3. linearize the rebuilt element again;
4. if it names a language, build the symbol index and run that language's
   engine against a ``HighlightView``.

Blocks are independent: an error while processing one is logged and the next
block proceeds.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from notex.config import Settings, get_settings
from notex.content_events import ContentEvent, get_content_events, is_multiline
from notex.dom import (
    Element,
    head_html,
    inner_html,
    is_full_document,
    parse_html,
    to_html,
)
from notex.engines import EngineRegistry
from notex.errors import UnknownEngineError
from notex.highlight import HighlightView
from notex.reindent import reindent
from notex.symbols import build_symbols

logger = logging.getLogger(__name__)


def preformat(node: Element, style: str) -> None:
    """Append *style* to the element's inline ``style`` attribute."""
    existing = (node.get_attribute("style") or "").strip().rstrip(";").strip()
    node.set_attribute("style", f"{existing}; {style}" if existing else style)


def highlight_code(
    language: str,
    events: Sequence[ContentEvent],
    registry: EngineRegistry,
    settings: Settings | None = None,
) -> bool:
    """Run the engine registered for *language* over the block's events.

    Returns:
        False when no engine is registered for *language*.
    """
    settings = settings or get_settings()
    engine = registry.find(language)
    if engine is None:
        logger.error("%s", UnknownEngineError(language))
        return False

    symbols = build_symbols(
        events,
        ignore_attribute=settings.markers.ignore_attribute,
        no_color_attribute=settings.markers.no_color_attribute,
    )
    view = HighlightView(symbols, wrapper_tag=settings.render.wrapper_tag)
    engine(view)
    return True


def process_code_block(
    node: Element,
    registry: EngineRegistry,
    settings: Settings | None = None,
) -> Element:
    """Reindent and highlight one code element.

    Returns:
        The element now standing in the tree: a rebuilt copy when the block
        was reindented, *node* itself otherwise.
    """
    settings = settings or get_settings()
    events = get_content_events(node)
    if is_multiline(events):
        preformat(node, settings.render.preformat_style)
        node = reindent(
            node,
            events,
            collapse_blank_lines=settings.reindent.collapse_blank_lines,
        )
        events = get_content_events(node)

    language_attribute = settings.markers.language_attribute
    if node.has_attribute(language_attribute):
        # A bare attribute names the empty language
        language = node.get_attribute(language_attribute) or ""
        highlight_code(language, events, registry, settings)
    return node


def find_code_elements(root: Element, code_tag: str) -> list[Element]:
    """Outermost elements named *code_tag* under *root*, in document order."""
    found: list[Element] = []

    def _walk(element: Element) -> None:
        for child in element.children:
            if not isinstance(child, Element):
                continue
            if child.tag == code_tag:
                found.append(child)
            else:
                _walk(child)

    _walk(root)
    return found


def process_document(
    root: Element,
    registry: EngineRegistry,
    settings: Settings | None = None,
) -> list[Element]:
    """Process every code element under *root*.

    Returns:
        The code elements as they stand after processing.
    """
    settings = settings or get_settings()
    processed: list[Element] = []
    for code in find_code_elements(root, settings.render.code_tag):
        try:
            processed.append(process_code_block(code, registry, settings))
        except Exception:
            logger.exception("Failed to process <%s> block", code.tag)
    logger.debug("Processed %d code block(s)", len(processed))
    return processed


def process_html(
    html: str,
    registry: EngineRegistry,
    settings: Settings | None = None,
) -> str:
    """Process the code blocks of an HTML string and serialise the result.

    Full documents come back as full documents (head preserved); fragments
    come back as fragments.
    """
    if not html:
        return html

    root = parse_html(html)
    process_document(root, registry, settings)
    return serialize_like(root, html)


def serialize_like(root: Element, source_html: str) -> str:
    """Serialise *root* as a full document or a fragment, matching *source_html*."""
    if not is_full_document(source_html):
        return inner_html(root)
    return f"<!DOCTYPE html><html>{head_html(source_html)}{to_html(root)}</html>"

"""Minimal markup tree used by the reindent and highlight passes.

Two node kinds only: ``Text`` (a character buffer) and ``Element`` (tag name,
attribute mapping, ordered children).  A node has at most one parent; inserting
a node elsewhere detaches it first.  Equality is identity, so the same text
appearing twice in a document is still two distinct nodes.

HTML enters through selectolax (``parse_html``) and leaves through
``to_html``.  Comments and doctypes are dropped on the way in.
"""

# Pattern: Functional Core (tree primitives, no I/O)

from __future__ import annotations

import html as html_module
import logging
from collections.abc import Iterator
from typing import Any

from selectolax.lexbor import LexborHTMLParser

logger = logging.getLogger(__name__)

# Elements serialised without a closing tag
VOID_ELEMENTS: frozenset[str] = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    )
)

# Elements whose text is written out unescaped
_RAW_TEXT_ELEMENTS = frozenset(("script", "style"))


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class Node:
    """Common parent/sibling bookkeeping for ``Text`` and ``Element``."""

    __slots__ = ("parent",)

    def __init__(self) -> None:
        self.parent: Element | None = None

    @property
    def index(self) -> int:
        """Position of this node among its parent's children.

        A linear scan of the siblings; nodes compare by identity, so
        ``list.index`` finds this exact node.  Code blocks keep sibling
        lists short, which keeps repeated tagging cheap in practice.
        """
        if self.parent is None:
            msg = "Detached node has no index"
            raise ValueError(msg)
        try:
            return self.parent.children.index(self)
        except ValueError:
            msg = "Node is missing from its parent's children"
            raise ValueError(msg) from None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index + 1
        siblings = self.parent.children
        return siblings[i] if i < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index
        return self.parent.children[i - 1] if i > 0 else None

    @property
    def text_content(self) -> str:
        raise NotImplementedError

    def clone(self) -> Node:
        raise NotImplementedError

    def remove(self) -> Node:
        """Detach this node from its parent and return it."""
        if self.parent is not None:
            del self.parent.children[self.index]
            self.parent = None
        return self

    def insert_after(self, node: Node) -> Node:
        """Insert *node* immediately after this node."""
        parent = self._require_parent()
        node.remove()
        parent.insert_child(self.index + 1, node)
        return node

    def insert_before(self, node: Node) -> Node:
        """Insert *node* immediately before this node."""
        parent = self._require_parent()
        node.remove()
        parent.insert_child(self.index, node)
        return node

    def replace_with(self, node: Node) -> Node:
        """Put *node* where this node is, detaching this node."""
        parent = self._require_parent()
        node.remove()
        i = self.index
        parent.children[i] = node
        node.parent = parent
        self.parent = None
        return node

    def _require_parent(self) -> Element:
        if self.parent is None:
            msg = f"{self!r} is not attached to a parent"
            raise ValueError(msg)
        return self.parent


class Text(Node):
    """A run of characters."""

    __slots__ = ("data",)

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    @property
    def text_content(self) -> str:
        return self.data

    def clone(self) -> Text:
        return Text(self.data)

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class Element(Node):
    """A tagged node with attributes and ordered children.

    Attribute values may be ``None`` for presence-only markers
    (``<span data-ignore>``).
    """

    __slots__ = ("attributes", "children", "tag")

    def __init__(
        self,
        tag: str,
        attributes: dict[str, str | None] | None = None,
        children: list[Node] | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.attributes: dict[str, str | None] = dict(attributes or {})
        self.children: list[Node] = []
        for child in children or ():
            self.append_child(child)

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def classes(self) -> list[str]:
        return (self.attributes.get("class") or "").split()

    def clone(self) -> Element:
        """Shallow clone: same tag and attributes, no children."""
        return Element(self.tag, self.attributes)

    def append_child(self, child: Node) -> Node:
        child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def insert_child(self, index: int, child: Node) -> Node:
        child.remove()
        child.parent = self
        self.children.insert(index, child)
        return child

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str | None) -> None:
        self.attributes[name] = value

    def add_class(self, *names: str) -> None:
        current = self.classes
        for name in names:
            if name and name not in current:
                current.append(name)
        self.attributes["class"] = " ".join(current)

    def iter_elements(self) -> Iterator[Element]:
        """Yield descendant elements in document order (self excluded)."""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter_elements()

    def __repr__(self) -> str:
        count = len(self.children)
        return f"Element({self.tag!r}, {self.attributes!r}, {count} children)"


# ---------------------------------------------------------------------------
# HTML in (selectolax) / out
# ---------------------------------------------------------------------------


def is_full_document(html: str) -> bool:
    """True when *html* starts like a whole page rather than a fragment."""
    lower = html.lstrip().lower()
    return lower.startswith("<!doctype") or lower.startswith("<html")


def _convert(node: Any, parent: Element) -> None:
    """Append the selectolax *node* (and its subtree) to *parent*."""
    tag = node.tag

    # Text node: selectolax uses "-text" as the tag
    if tag == "-text":
        parent.append_child(Text(node.text_content or ""))
        return

    # Comments, doctypes and other non-element nodes
    if not tag or tag[0] in "-_!#":
        logger.debug("Dropping %s node while parsing", tag)
        return

    element = Element(tag, dict(node.attributes))
    parent.append_child(element)
    child = node.child
    while child is not None:
        _convert(child, element)
        child = child.next


def parse_html(html: str) -> Element:
    """Parse *html* and return a detached root whose children are the body content.

    The returned root is a synthetic ``body`` element; its children are the
    parsed nodes in document order.
    """
    root = Element("body")
    if not html:
        return root

    tree = LexborHTMLParser(html)
    body = tree.body
    source = body if body is not None else tree.root
    if source is None:
        return root

    root.attributes = dict(source.attributes) if body is not None else {}
    child = source.child
    while child is not None:
        _convert(child, root)
        child = child.next
    return root


def head_html(html: str) -> str:
    """Serialised ``<head>`` of a full document, or ``""``."""
    tree = LexborHTMLParser(html)
    head = tree.head
    if head is None:
        return ""
    return head.html or ""


def _render_attributes(attributes: dict[str, str | None]) -> str:
    parts: list[str] = []
    for name, value in attributes.items():
        if value is None:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html_module.escape(value, quote=True)}"')
    return "".join(parts)


def _write(node: Node, out: list[str], raw: bool) -> None:
    if isinstance(node, Text):
        out.append(node.data if raw else html_module.escape(node.data, quote=False))
        return

    assert isinstance(node, Element)
    out.append(f"<{node.tag}{_render_attributes(node.attributes)}>")
    if node.tag in VOID_ELEMENTS and not node.children:
        return
    child_raw = node.tag in _RAW_TEXT_ELEMENTS
    for child in node.children:
        _write(child, out, child_raw)
    out.append(f"</{node.tag}>")


def to_html(node: Node) -> str:
    """Serialise *node* (including its own tag when it is an element)."""
    out: list[str] = []
    _write(node, out, raw=False)
    return "".join(out)


def inner_html(node: Element) -> str:
    """Serialise the children of *node* only."""
    out: list[str] = []
    raw = node.tag in _RAW_TEXT_ELEMENTS
    for child in node.children:
        _write(child, out, raw)
    return "".join(out)

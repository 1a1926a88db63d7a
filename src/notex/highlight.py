"""Read and tag interface handed to highlighting engines.

A ``HighlightView`` presents a block's symbols as one flat string that engines
can index, slice and match against, and turns ``tag`` requests into
physical tree edits: each affected text node is split and the requested
characters moved into a styled wrapper element.

Errors never escape the view.  A bad request is logged and degrades to an
empty result or a no-op, so one faulty rule can't stop the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from notex.dom import Element, Text
from notex.errors import EmptyRangeError, PropertyNotFoundError, RangeError
from notex.symbols import Symbol

logger = logging.getLogger(__name__)

DEFAULT_WRAPPER_TAG = "span"


def _normalise_classes(classes: str | Sequence[str]) -> list[str]:
    if isinstance(classes, str):
        return classes.split()
    return [name for name in classes if name]


def put_text_range_into_wrapper(
    node: Text,
    start: int,
    end: int,
    classes: Sequence[str],
    wrapper_tag: str = DEFAULT_WRAPPER_TAG,
) -> tuple[Text, Text | None]:
    """Split *node* around ``[start, end)`` and wrap the middle.

    The front text stays in *node* (which is removed when the front is
    empty); the middle goes into a new wrapper element inserted after it;
    the rest becomes a new text node after the wrapper.

    Returns:
        ``(wrapped, remaining)``: the text node inside the wrapper and the
        text node holding the rest (``None`` when nothing follows).
    """
    data = node.data
    wrapper = Element(wrapper_tag)
    if classes:
        wrapper.add_class(*classes)
    wrapped = Text(data[start:end])
    wrapper.append_child(wrapped)
    node.insert_after(wrapper)

    remaining: Text | None = None
    rest = data[end:]
    if rest:
        remaining = Text(rest)
        wrapper.insert_after(remaining)

    if start == 0:
        node.remove()
    else:
        node.data = data[:start]

    return wrapped, remaining


class HighlightView:
    """Flat, character-addressable view over a block's symbols.

    ``len(view)``, ``view[i]``, ``view[a:b]`` and ``str(view)`` read the
    symbol values; ``tag`` wraps a range in a styled element.  The symbol
    count never changes, whatever gets tagged.
    """

    def __init__(
        self,
        symbols: list[Symbol],
        *,
        wrapper_tag: str = DEFAULT_WRAPPER_TAG,
    ) -> None:
        self._symbols = symbols
        self.wrapper_tag = wrapper_tag

    # -- reading ------------------------------------------------------------

    @property
    def length(self) -> int:
        return len(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def read(self, index: int) -> str:
        """Value of symbol *index*, or ``""`` (logged) when there is none."""
        try:
            return self._symbol_at(index).value
        except PropertyNotFoundError as exc:
            logger.error("%s", exc)
            return ""

    def __getitem__(self, key: int | slice) -> str:
        if isinstance(key, slice) and key.step in (None, 1):
            start = 0 if key.start is None else key.start
            end = len(self._symbols) if key.stop is None else key.stop
            return self.slice(start, end)
        return self.read(key)  # type: ignore[arg-type]

    def colorable(self, index: int) -> bool:
        try:
            return self._symbol_at(index).colorable
        except PropertyNotFoundError as exc:
            logger.error("%s", exc)
            return False

    def slice(self, start: int, end: int) -> str:
        """Values of ``[start, end)`` joined; ``""`` (logged) when out of range."""
        try:
            self._check_bounds("slice", start, end)
        except RangeError as exc:
            logger.error("%s", exc)
            return ""
        return "".join(symbol.value for symbol in self._symbols[start:end])

    def to_string(self) -> str:
        return "".join(symbol.value for symbol in self._symbols)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"HighlightView({self.to_string()!r})"

    # -- tagging ------------------------------------------------------------

    def tag(self, start: int, count: int, classes: str | Sequence[str]) -> None:
        """Wrap symbols ``[start, start + count)`` in styled elements.

        Consecutive colorable symbols stored in the same text node form one
        run and get one wrapper each; non-colorable symbols are skipped.
        """
        try:
            self._check_tag_range(start, count)
        except EmptyRangeError as exc:
            logger.warning("%s", exc)
            return
        except RangeError as exc:
            logger.error("%s", exc)
            return

        names = _normalise_classes(classes)
        end = start + count
        run_start: int | None = None
        for i in range(start, end + 1):
            symbol = self._symbols[i] if i < end else None
            if run_start is not None and (
                symbol is None
                or not symbol.colorable
                or symbol.node is not self._symbols[run_start].node
            ):
                self._wrap_run(run_start, i, names)
                run_start = None
            if symbol is not None and symbol.colorable and run_start is None:
                run_start = i

    def _wrap_run(self, first: int, stop: int, classes: list[str]) -> None:
        """Wrap symbols ``[first, stop)``, all stored in the same text node."""
        head = self._symbols[first]
        node = head.node
        begin = head.position
        finish = begin + (stop - first)
        wrapped, remaining = put_text_range_into_wrapper(
            node, begin, finish, classes, self.wrapper_tag
        )

        for offset in range(stop - first):
            symbol = self._symbols[first + offset]
            symbol.node = wrapped
            symbol.position = offset

        if remaining is None:
            return
        for offset in range(len(remaining.data)):
            symbol = self._symbols[stop + offset]
            symbol.node = remaining
            symbol.position = offset

    # -- validation ---------------------------------------------------------

    def _symbol_at(self, index: object) -> Symbol:
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < len(self._symbols)
        ):
            raise PropertyNotFoundError(index)
        return self._symbols[index]

    def _check_bounds(self, action: str, start: int, end: int) -> None:
        length = len(self._symbols)
        if start < 0 or end < 0 or start > length or end > length:
            raise RangeError(action, start, end, length)

    def _check_tag_range(self, start: int, count: int) -> None:
        if count == 0:
            raise EmptyRangeError(start)
        length = len(self._symbols)
        if count < 0 or start < 0 or start >= length or start + count > length:
            raise RangeError("highlight", start, start + count, length)

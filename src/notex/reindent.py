"""Remove the common leading indentation of a multi-line code block.

Three passes over the block's content events:

1. candidate detection: treat all text events as one string and record, for
   every line, the run of leading spaces (``SpaceRemovalTarget``);
2. indentation computation: the shortest run among the qualifying lines;
3. application: cap every qualifying run at that indentation.

The tree is then rebuilt from the events with the target ranges elided.
Inline markup survives untouched because only text events are rewritten.

Blank-line markers (a line break met while still at line start) are always
detected and never count towards the indentation.  By default the rebuild
keeps them; ``collapse_blank_lines=True`` drops each of them, so bare line
breaks at the start of a line disappear.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Generator, Iterator, Sequence
from dataclasses import dataclass

from notex.content_events import ContentEvent, EventKind
from notex.dom import Element, Text

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SpaceRemovalTarget:
    """Leading characters of one line, inside a single text event.

    Attributes:
        event_index: Index of the owning event in the event list.
        start: Offset of the first character inside that event's text.
        count: Number of characters to remove (rewritten by pass 3).
    """

    event_index: int
    start: int
    count: int


# ---------------------------------------------------------------------------
# Pass 1: candidate detection
# ---------------------------------------------------------------------------


def stream_space_removal_candidates(
    events: Sequence[ContentEvent],
) -> Iterator[SpaceRemovalTarget]:
    """Yield one target per line start, in document order.

    Each text event starts a fresh pending run at its offset 0.  An element
    opening at line start ends the line's indentation there, even when the
    pending run is empty.
    """
    at_line_start = True
    run_event: int | None = None
    run_start = 0
    count = 0

    for event_index, event in enumerate(events):
        if event.kind is EventKind.OPEN:
            if at_line_start:
                owner = run_event if run_event is not None else event_index
                yield SpaceRemovalTarget(owner, run_start, count)
                at_line_start = False
            continue

        if event.kind is EventKind.CLOSE:
            continue

        run_event = event_index
        run_start = 0
        count = 0
        for offset, symbol in enumerate(event.text):
            if at_line_start:
                if symbol == "\n":
                    yield SpaceRemovalTarget(event_index, offset, 1)
                    run_start = offset + 1
                    count = 0
                elif symbol == " ":
                    count += 1
                else:
                    at_line_start = False
                    yield SpaceRemovalTarget(event_index, run_start, count)
            elif symbol == "\n":
                at_line_start = True
                run_start = offset + 1
                count = 0

    if at_line_start and run_event is not None:
        # The block's last line break is itself a marker
        if run_start > 0 and events[run_event].text[run_start - 1] == "\n":
            yield SpaceRemovalTarget(run_event, run_start - 1, 1)
        yield SpaceRemovalTarget(run_event, run_start, count)


# ---------------------------------------------------------------------------
# Passes 2 and 3: indentation
# ---------------------------------------------------------------------------


def _owning_text(events: Sequence[ContentEvent], target: SpaceRemovalTarget) -> str:
    return events[target.event_index].text


def is_line_break_marker(
    events: Sequence[ContentEvent], target: SpaceRemovalTarget
) -> bool:
    """True for the single-character target standing for a blank line."""
    text = _owning_text(events, target)
    return target.start < len(text) and text[target.start] == "\n"


def removes_space_only_content(
    events: Sequence[ContentEvent], target: SpaceRemovalTarget
) -> bool:
    """True when the owning text holds only spaces from the target onwards."""
    event = events[target.event_index]
    if event.kind is not EventKind.TEXT:
        return False
    return all(symbol == " " for symbol in event.text[target.start :])


def _is_exempt(
    events: Sequence[ContentEvent],
    targets: Sequence[SpaceRemovalTarget],
    i: int,
) -> bool:
    """Blank-line markers and a trailing whitespace-only tail keep their length."""
    target = targets[i]
    if is_line_break_marker(events, target):
        return True
    return i + 1 == len(targets) and removes_space_only_content(events, target)


def get_indentation(
    events: Sequence[ContentEvent], targets: Sequence[SpaceRemovalTarget]
) -> int | None:
    """Shortest qualifying run, or ``None`` when no line qualifies."""
    indentation: int | None = None
    for i, target in enumerate(targets):
        if _is_exempt(events, targets, i):
            continue
        if indentation is None or target.count < indentation:
            indentation = target.count
    return indentation


def apply_indentation(
    indentation: int | None,
    events: Sequence[ContentEvent],
    targets: Sequence[SpaceRemovalTarget],
) -> None:
    """Cap every qualifying target at *indentation*, in place."""
    if indentation is None:
        return
    for i, target in enumerate(targets):
        if _is_exempt(events, targets, i):
            continue
        target.count = indentation


def get_space_removal_targets(
    events: Sequence[ContentEvent],
) -> list[SpaceRemovalTarget]:
    """Run all three passes and return the final targets."""
    targets = list(stream_space_removal_candidates(events))
    indentation = get_indentation(events, targets)
    apply_indentation(indentation, events, targets)
    logger.debug(
        "Computed indentation %s over %d line target(s)", indentation, len(targets)
    )
    return targets


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------


def _reconstruct_querying_text(
    root_clone: Element, events: Sequence[ContentEvent]
) -> Generator[int, str, None]:
    """Rebuild the tree under *root_clone*, asking for each text slot.

    Yields the index of every text event and expects the replacement text
    back through ``send()`` before appending the corresponding node.
    """
    parents = [root_clone]
    for event_index, event in enumerate(events):
        if event.kind is EventKind.TEXT:
            content = yield event_index
            parents[-1].append_child(Text(content))
        elif event.kind is EventKind.OPEN:
            assert isinstance(event.node, Element)
            element = event.node.clone()
            parents[-1].append_child(element)
            parents.append(element)
        else:
            parents.pop()


def _elide(text: str, targets: Sequence[SpaceRemovalTarget]) -> str:
    """Copy *text* skipping every target range (targets in offset order)."""
    buffer: list[str] = []
    i = 0
    for target in targets:
        buffer.append(text[i : target.start])
        i = max(i, target.start + target.count)
    buffer.append(text[i:])
    return "".join(buffer)


def reconstruct_node(
    root_clone: Element,
    events: Sequence[ContentEvent],
    targets: Sequence[SpaceRemovalTarget],
) -> None:
    """Drive the reconstruction, answering each text slot with elided text."""
    by_event: dict[int, list[SpaceRemovalTarget]] = defaultdict(list)
    for target in targets:
        by_event[target.event_index].append(target)

    reconstructor = _reconstruct_querying_text(root_clone, events)
    try:
        event_index = next(reconstructor)
        while True:
            text = _elide(events[event_index].text, by_event.get(event_index, ()))
            event_index = reconstructor.send(text)
    except StopIteration:
        return


def reindent(
    node: Element,
    events: Sequence[ContentEvent],
    *,
    collapse_blank_lines: bool = False,
) -> Element:
    """Return a dedented copy of *node*, swapped into its parent's place.

    Args:
        node: The code element whose content *events* describe.
        events: Content events of *node* (from ``get_content_events``).
        collapse_blank_lines: Also remove the line break of every blank-line
            marker.

    Returns:
        The rebuilt element.  The original is detached when it had a parent.
    """
    targets = get_space_removal_targets(events)
    if not collapse_blank_lines:
        targets = [t for t in targets if not is_line_break_marker(events, t)]

    clone = node.clone()
    reconstruct_node(clone, events, targets)
    if node.parent is not None:
        node.replace_with(clone)
    return clone

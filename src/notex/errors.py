"""Error kinds raised while annotating code blocks.

None of these escape a single block: the facade that detects one logs it and
degrades (no mutation, empty string, untagged block).
"""

from __future__ import annotations


class NotexError(Exception):
    """Base class for all notex errors."""


class EmptyRangeError(NotexError):
    """A tag request covered zero symbols."""

    def __init__(self, start: int) -> None:
        self.start = start
        super().__init__(f"Can't highlight an empty range at symbol {start}.")


class RangeError(NotexError):
    """A tag or slice request reached outside the symbol range."""

    def __init__(self, action: str, start: int, end: int, length: int) -> None:
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"Can't {action} symbols from {start} to {end - 1} inclusive "
            f"(length {length})."
        )


class UnknownEngineError(NotexError):
    """No engine is registered for the requested language."""

    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(f"Can't find {language!r} syntax highlighter.")


class InvalidEngineTypeError(NotexError):
    """An engine was neither a callable nor a sequence of rules."""

    def __init__(self, language: str, reason: str = "") -> None:
        self.language = language
        message = (
            f"Expected {language!r} syntax highlighter to be either "
            "a sequence of rules or a callable."
        )
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class PropertyNotFoundError(NotexError):
    """A view was read with a key it doesn't support."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Input doesn't have {key!r} property.")

"""Tests for the per-character symbol index and its marker zones."""

from __future__ import annotations

import logging

import pytest

from notex.content_events import get_content_events
from notex.dom import Element, Text
from notex.symbols import build_symbols
from tests.conftest import code, el


def _symbols(root: Element) -> list[tuple[str, bool]]:
    return [(s.value, s.colorable) for s in build_symbols(get_content_events(root))]


class TestSymbolIndex:
    """One symbol per character, pointing at its text node."""

    def test_count_matches_character_count(self) -> None:
        root = code("ab", el("em", "cd", el("b", "")), "ef\n")
        symbols = build_symbols(get_content_events(root))
        assert len(symbols) == len(root.text_content) == 7

    def test_owner_and_position(self) -> None:
        first, second = Text("ab"), Text("c")
        root = code(first, el("em", second))
        symbols = build_symbols(get_content_events(root))
        assert [(s.node, s.position) for s in symbols] == [
            (first, 0),
            (first, 1),
            (second, 0),
        ]

    def test_plain_text_is_colorable(self) -> None:
        assert _symbols(code("ab")) == [("a", True), ("b", True)]


class TestMarkerZones:
    """Ignore and no-color zones."""

    def test_ignore_blanks_values(self) -> None:
        root = code("a", el("span", "bc", data_ignore=None), "d")
        assert "".join(v for v, _ in _symbols(root)) == "a  d"

    def test_ignore_keeps_colorable(self) -> None:
        root = code(el("span", "x", data_ignore=None))
        assert _symbols(root) == [(" ", True)]

    def test_no_color_inside_ignore(self) -> None:
        root = code(
            el("span", "a", el("i", "b", data_no_color=None), "c", data_ignore=None),
            "d",
        )
        assert _symbols(root) == [
            (" ", True),
            (" ", False),
            (" ", True),
            ("d", True),
        ]

    def test_both_markers_on_one_element(self) -> None:
        root = code(el("span", "ab", data_ignore=None, data_no_color=None), "c")
        assert _symbols(root) == [(" ", False), (" ", False), ("c", True)]

    def test_no_color_without_ignore_is_ignored(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = code(el("span", "ab", data_no_color=None))
        with caplog.at_level(logging.WARNING, logger="notex.symbols"):
            result = _symbols(root)
        assert result == [("a", True), ("b", True)]
        assert "outside any data-ignore zone" in caplog.text

    def test_nested_ignore_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        root = code(
            el("span", "a", el("span", "b", data_ignore=None), "c", data_ignore=None),
            "d",
        )
        with caplog.at_level(logging.WARNING, logger="notex.symbols"):
            result = "".join(v for v, _ in _symbols(root))
        # The outer zone stays active after the inner element closes.
        assert result == "   d"
        assert "nested data-ignore" in caplog.text

    def test_custom_attribute_names(self) -> None:
        root = code(el("span", "ab", hide=None), "c")
        symbols = build_symbols(get_content_events(root), ignore_attribute="hide")
        assert "".join(s.value for s in symbols) == "  c"

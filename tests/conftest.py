"""Shared pytest fixtures for notex tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from notex.config import Settings, get_settings
from notex.dom import Element, Node, Text
from notex.engines import EngineRegistry


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults only (no .env file)."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def registry() -> EngineRegistry:
    return EngineRegistry()


@pytest.fixture
def clear_settings_cache() -> Generator[None]:
    """Reset the cached settings before and after the test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def code(*children: Node | str, **attributes: str | None) -> Element:
    """Build a ``<code>`` element; plain strings become text nodes.

    Attribute keywords use underscores for dashes (``data_hl="py"``).
    """
    attrs = {name.replace("_", "-"): value for name, value in attributes.items()}
    return Element("code", attrs, [_as_node(child) for child in children])


def el(tag: str, *children: Node | str, **attributes: str | None) -> Element:
    """Build an arbitrary element the same way as ``code``."""
    attrs = {name.replace("_", "-"): value for name, value in attributes.items()}
    return Element(tag, attrs, [_as_node(child) for child in children])


def _as_node(child: Node | str) -> Node:
    return Text(child) if isinstance(child, str) else child

"""Language engines: registry, declarative rules and engine modules.

An engine is either a callable taking a ``HighlightView`` or a sequence of
``HighlightRule``s (pattern + style classes).  Engines are looked up by the
language name a code element carries.

Usage:
    from notex.engines import EngineRegistry

    registry = EngineRegistry()
    registry.add("sql", [{"pattern": r"\\bSELECT\\b", "classes": ["kw"]}])
    registry.add("shell", my_shell_highlighter)

Engine modules (named on the command line) expose ``register(registry)``.
"""

from __future__ import annotations

import importlib
import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partial
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from notex.errors import InvalidEngineTypeError
from notex.highlight import HighlightView

__all__ = [
    "Engine",
    "EngineRegistry",
    "HighlightRule",
    "highlight_with_rules",
    "load_engine_module",
]

logger = logging.getLogger(__name__)

Engine = Callable[[HighlightView], None]


class HighlightRule(BaseModel):
    """Tag every match of ``pattern`` with ``classes``."""

    model_config = ConfigDict(frozen=True)

    pattern: re.Pattern[str]
    classes: tuple[str, ...]

    @field_validator("classes", mode="before")
    @classmethod
    def _split_class_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(value.split())
        return value


def _coerce_rule(rule: Any) -> HighlightRule:
    """Accept a rule, a ``{"pattern", "classes"}`` mapping or a pair."""
    if isinstance(rule, HighlightRule):
        return rule
    if isinstance(rule, Mapping):
        return HighlightRule.model_validate(dict(rule))
    if isinstance(rule, tuple) and len(rule) == 2:
        pattern, classes = rule
        return HighlightRule(pattern=pattern, classes=classes)
    msg = f"unsupported rule {rule!r}"
    raise TypeError(msg)


def highlight_with_rules(view: HighlightView, rules: Iterable[HighlightRule]) -> None:
    """Apply declarative rules, in rule order then match order.

    The content string is captured once up front, so match offsets stay
    valid even though each ``tag`` call restructures the tree.
    """
    text = view.to_string()
    for rule in rules:
        for match in rule.pattern.finditer(text):
            length = match.end() - match.start()
            if length == 0:
                continue
            view.tag(match.start(), length, rule.classes)


def _noop_engine(view: HighlightView) -> None:  # noqa: ARG001
    return None


def _as_engine(language: str, engine: Any) -> Engine:
    if callable(engine):
        return engine
    if isinstance(engine, Sequence) and not isinstance(engine, (str, bytes)):
        try:
            rules = tuple(_coerce_rule(rule) for rule in engine)
        except (TypeError, ValidationError) as exc:
            raise InvalidEngineTypeError(language, str(exc)) from exc
        return partial(highlight_with_rules, rules=rules)
    raise InvalidEngineTypeError(language, f"Got {type(engine).__name__}.")


class EngineRegistry:
    """Mapping of language name to engine.

    Created once by the caller, filled during start-up and then only read.
    Registration never leaves a language unresolvable: a rejected engine is
    replaced by a no-op.
    """

    def __init__(self) -> None:
        self._engines: dict[str, Engine] = {}

    def add(self, language: str, engine: Any) -> None:
        try:
            self._engines[language] = _as_engine(language, engine)
        except InvalidEngineTypeError as exc:
            logger.error("%s", exc)
            self._engines[language] = _noop_engine
            return
        logger.debug("Registered syntax highlighter: %s", language)

    def find(self, language: str) -> Engine | None:
        return self._engines.get(language)

    def languages(self) -> list[str]:
        return sorted(self._engines)

    def __contains__(self, language: object) -> bool:
        return language in self._engines

    def __len__(self) -> int:
        return len(self._engines)


def load_engine_module(registry: EngineRegistry, module_name: str) -> bool:
    """Import *module_name* and let its ``register(registry)`` add engines.

    Import failures and modules without ``register`` are logged and skipped.

    Returns:
        True when the module registered its engines.
    """
    try:
        module = importlib.import_module(module_name)
    except Exception:
        logger.exception("Failed to import engine module: %s", module_name)
        return False

    register = getattr(module, "register", None)
    if not callable(register):
        logger.warning("Module %s has no register(registry) function", module_name)
        return False

    try:
        register(registry)
    except Exception:
        logger.exception("Engine module %s failed to register", module_name)
        return False
    return True

"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.

Environment variables use the ``NOTEX_`` prefix and a double-underscore
delimiter for nesting: ``NOTEX_MARKERS__LANGUAGE_ATTRIBUTE``,
``NOTEX_REINDENT__COLLAPSE_BLANK_LINES``, ``NOTEX_LOG__LEVEL``, etc.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/notex/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class MarkerConfig(BaseModel):
    """Attribute names read from the markup."""

    ignore_attribute: str = "data-ignore"
    no_color_attribute: str = "data-no-color"
    language_attribute: str = "data-hl"

    @model_validator(mode="after")
    def markers_are_distinct(self) -> MarkerConfig:
        names = (
            self.ignore_attribute,
            self.no_color_attribute,
            self.language_attribute,
        )
        if len(set(names)) != len(names):
            msg = "MARKERS attribute names must be distinct"
            raise ValueError(msg)
        return self


class ReindentConfig(BaseModel):
    """Indentation removal behaviour."""

    collapse_blank_lines: bool = False


class RenderConfig(BaseModel):
    """Elements produced and recognised in the tree."""

    code_tag: str = "code"
    wrapper_tag: str = "span"
    preformat_style: str = "display: block; white-space: pre-wrap"


class LogConfig(BaseModel):
    """Logging destinations."""

    level: str = "INFO"
    file: Path | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _known_level(cls, value: object) -> object:
        if isinstance(value, str):
            upper = value.upper()
            if upper not in _LOG_LEVELS:
                msg = f"LOG__LEVEL must be one of {', '.join(_LOG_LEVELS)}"
                raise ValueError(msg)
            return upper
        return value


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """notex settings with automatic .env loading and type validation."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_prefix="NOTEX_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    markers: MarkerConfig = MarkerConfig()
    reindent: ReindentConfig = ReindentConfig()
    render: RenderConfig = RenderConfig()
    log: LogConfig = LogConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings

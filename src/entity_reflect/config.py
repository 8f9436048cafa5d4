"""
Runtime configuration for entity-reflect.

Settings are read from environment variables on every call so that every
operation stays stateless:

    ENTITY_REFLECT_STRICT_ENUMS        raise ParseError for unknown enum names
                                       instead of returning the raw string
    ENTITY_REFLECT_WARN_DUPLICATE_IDS  log a warning when more than one member
                                       carries the Id marker
    ENTITY_REFLECT_LOG_LEVEL           level used by configure_logging()

Usage:
    from entity_reflect.config import ReflectSettings, get_settings

    settings = get_settings()
    coerce("bogus", Color, settings=ReflectSettings(strict_enums=True))
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

STRICT_ENUMS_VAR = "ENTITY_REFLECT_STRICT_ENUMS"
WARN_DUPLICATE_IDS_VAR = "ENTITY_REFLECT_WARN_DUPLICATE_IDS"
LOG_LEVEL_VAR = "ENTITY_REFLECT_LOG_LEVEL"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ReflectSettings(BaseModel):
    """Behaviour switches for introspection and coercion."""

    strict_enums: bool = Field(
        default=False,
        description="Unknown enum names raise ParseError instead of returning the raw string",
    )
    warn_on_duplicate_identifiers: bool = Field(
        default=True,
        description="Log a warning when several members carry the Id marker",
    )
    log_level: str = Field(default="WARNING", description="Level for configure_logging()")

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name."""
        level = v.upper().strip()
        if level not in _LEVELS:
            raise ValueError(f"Log level '{v}' must be one of {', '.join(_LEVELS)}")
        return level


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name, "").lower().strip()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    logger.warning(
        "Unknown %s value '%s'. Valid values: 1/true/yes/on, 0/false/no/off. Defaulting to %s.",
        name,
        raw,
        default,
    )
    return default


def _env_level(environ: Mapping[str, str]) -> str:
    raw = environ.get(LOG_LEVEL_VAR, "").upper().strip()
    if not raw:
        return "WARNING"
    if raw not in _LEVELS:
        logger.warning(
            "Unknown %s value '%s'. Valid values: %s. Defaulting to WARNING.",
            LOG_LEVEL_VAR,
            raw,
            ", ".join(_LEVELS),
        )
        return "WARNING"
    return raw


def load_settings(environ: Mapping[str, str] | None = None) -> ReflectSettings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ`` (for tests).

    Returns:
        ReflectSettings: Settings with defaults for unset or invalid values.
    """
    env = os.environ if environ is None else environ
    return ReflectSettings(
        strict_enums=_env_flag(env, STRICT_ENUMS_VAR, False),
        warn_on_duplicate_identifiers=_env_flag(env, WARN_DUPLICATE_IDS_VAR, True),
        log_level=_env_level(env),
    )


def get_settings() -> ReflectSettings:
    """Settings for the current process environment."""
    return load_settings()

"""Shared pytest fixtures for entity-reflect tests."""

from __future__ import annotations

import logging

import pytest

from entity_reflect.config import (
    LOG_LEVEL_VAR,
    STRICT_ENUMS_VAR,
    WARN_DUPLICATE_IDS_VAR,
    ReflectSettings,
)
from entity_reflect.logging_config import ROOT_LOGGER


@pytest.fixture(autouse=True)
def clean_reflect_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test with default settings regardless of the outer environment."""
    for var in (STRICT_ENUMS_VAR, WARN_DUPLICATE_IDS_VAR, LOG_LEVEL_VAR):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def restore_reflect_logger():
    """Undo configure_logging() calls so caplog keeps seeing library records."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def strict_settings() -> ReflectSettings:
    """Settings where unknown enum names are errors."""
    return ReflectSettings(strict_enums=True)


@pytest.fixture
def quiet_settings() -> ReflectSettings:
    """Settings without duplicate identifier warnings."""
    return ReflectSettings(warn_on_duplicate_identifiers=False)

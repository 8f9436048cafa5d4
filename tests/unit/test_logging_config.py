"""Tests for logging setup."""

import io
import json
import logging
from typing import Annotated

from entity_reflect import Id, locate_identifier_field
from entity_reflect.config import LOG_LEVEL_VAR
from entity_reflect.logging_config import ROOT_LOGGER, configure_logging


def test_console_format():
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)

    logging.getLogger("entity_reflect.identifier").warning("Several members of %s", "Order")

    line = stream.getvalue().strip()
    assert "[entity_reflect.identifier]" in line
    assert "WARNING" in line
    assert line.endswith("Several members of Order")


def test_info_lines_have_no_level_label():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    logging.getLogger("entity_reflect.cli").info("ready")

    assert "INFO" not in stream.getvalue()
    assert stream.getvalue().strip().endswith("ready")


def test_json_format():
    stream = io.StringIO()
    configure_logging("DEBUG", json_format=True, stream=stream)

    logging.getLogger("entity_reflect.coercion").debug(
        "No member %s", "BOGUS", extra={"context": {"target": "Color"}}
    )

    entry = json.loads(stream.getvalue().strip())
    assert entry["level"] == "DEBUG"
    assert entry["logger"] == "entity_reflect.coercion"
    assert entry["message"] == "No member BOGUS"
    assert entry["context"] == {"target": "Color"}
    assert entry["timestamp"].endswith("Z")


def test_json_format_includes_exception():
    stream = io.StringIO()
    configure_logging("ERROR", json_format=True, stream=stream)

    try:
        raise ValueError("bad value")
    except ValueError:
        logging.getLogger("entity_reflect").exception("failed")

    entry = json.loads(stream.getvalue().strip())
    assert entry["exception"] == {"type": "ValueError", "message": "bad value"}


def test_level_filters_records():
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)

    logging.getLogger("entity_reflect.descriptor").debug("hidden")

    assert stream.getvalue() == ""


def test_repeated_calls_keep_a_single_handler():
    configure_logging("INFO")
    logger = configure_logging("DEBUG")

    assert logger is logging.getLogger(ROOT_LOGGER)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_level_defaults_to_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_VAR, "error")

    logger = configure_logging()

    assert logger.level == logging.ERROR


class _BaseRecord:
    id: Annotated[int, Id()]


class _Record(_BaseRecord):
    code: Annotated[str, Id()]


def test_json_format_carries_duplicate_identifier_context():
    stream = io.StringIO()
    configure_logging("WARNING", json_format=True, stream=stream)

    locate_identifier_field(_Record)

    entry = json.loads(stream.getvalue().strip())
    assert entry["logger"] == "entity_reflect.identifier"
    assert entry["context"] == {
        "entity": "_Record",
        "candidates": ["_Record.code", "_BaseRecord.id"],
    }

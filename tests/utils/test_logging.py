import json
import logging

import pytest
import structlog

from Medical_FHIR_model.config import LoggingSettings
from Medical_FHIR_model.utils.logging import JsonFormatter, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    logging.basicConfig(level=logging.WARNING, force=True)


def test_configure_logging_renders_json(capsys):
    configure_logging(settings=LoggingSettings(level="info", json=True))

    get_logger("test").info("model.loaded", types=3)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "model.loaded"
    assert payload["types"] == 3
    assert payload["level"] == "info"


def test_configure_logging_filters_below_level(capsys):
    configure_logging(level="warning")

    get_logger("test").info("hidden")
    get_logger("test").warning("shown")

    output = capsys.readouterr().out
    assert "hidden" not in output
    assert "shown" in output


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("mfm", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.type_name = "Team"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["logger"] == "mfm"
    assert payload["type_name"] == "Team"

import io
import json
import logging
import sys

from aegisprobe.infra.logging_utils import LOGGER, configure_logging


def test_log_lines_are_json_with_extra_data() -> None:
    buffer = io.StringIO()
    previous = LOGGER.handlers[0].stream  # type: ignore[attr-defined]
    configure_logging(logging.INFO, stream=buffer)
    try:
        LOGGER.info("Check finished", extra={"extra_data": {"check": "nx", "result": True}})
    finally:
        configure_logging(logging.INFO, stream=previous)
    record = json.loads(buffer.getvalue().splitlines()[-1])
    assert record["message"] == "Check finished"
    assert record["level"] == "INFO"
    assert record["check"] == "nx"
    assert record["timestamp"].endswith("Z")


def test_default_stream_is_stderr() -> None:
    handler = LOGGER.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is not sys.stdout

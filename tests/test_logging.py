import json
import logging
import sys

from restaurantos.core.logging import JsonFormatter, configure_logging


def _record(msg, *args, exc_info=None, **extra):
    record = logging.LogRecord("restaurantos.test", logging.WARNING, __file__, 1, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context_fields():
    line = JsonFormatter().format(
        _record("Order moved %s -> %s", "pending", "cooking", restaurant_id="r1", order_id="o1")
    )
    data = json.loads(line)
    assert data["msg"] == "Order moved pending -> cooking"
    assert data["level"] == "WARNING"
    assert data["logger"] == "restaurantos.test"
    assert data["restaurant_id"] == "r1"
    assert data["order_id"] == "o1"
    assert "table_number" not in data
    assert "exc" not in data


def test_json_formatter_renders_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record("failed", exc_info=sys.exc_info(), table_number=4)

    data = json.loads(JsonFormatter().format(record))
    assert data["table_number"] == 4
    assert "RuntimeError: boom" in data["exc"]


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging(level="debug", json_output=True)
        configure_logging(level="debug", json_output=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])

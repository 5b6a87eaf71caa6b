import json
import logging
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from hn_threads.services.config import load_config
from hn_threads.services.logging import JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("HN_BASE_URL", "REQUEST_TIMEOUT", "MAX_CONCURRENCY",
                "TOP_STORIES_LIMIT", "OUTPUT_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "HN_BASE_URL: https://mirror.example/v0\n"
        "REQUEST_TIMEOUT: 5\n"
        "MAX_CONCURRENCY: 16\n"
        "TOP_STORIES_LIMIT: 50\n"
        "log_ignored: true\n"
        "LOG_LEVEL: debug\n"
    )

    config = load_config(str(path))

    assert config.HN_BASE_URL == "https://mirror.example/v0"
    assert config.REQUEST_TIMEOUT == 5.0
    assert config.MAX_CONCURRENCY == 16
    assert config.TOP_STORIES_LIMIT == 50
    assert config.OUTPUT_DIR == "output"
    assert config.LOG_LEVEL == "DEBUG"


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("MAX_CONCURRENCY:\n")

    config = load_config(str(path))

    assert config.HN_BASE_URL == "https://hacker-news.firebaseio.com/v0"
    assert config.REQUEST_TIMEOUT == 30.0
    assert config.MAX_CONCURRENCY is None
    assert config.TOP_STORIES_LIMIT == 200


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "config.yml"
    path.write_text("MAX_CONCURRENCY: 16\nOUTPUT_DIR: dumps\n")
    monkeypatch.setenv("MAX_CONCURRENCY", "4")
    monkeypatch.setenv("OUTPUT_DIR", "/tmp/elsewhere")

    config = load_config(str(path))

    assert config.MAX_CONCURRENCY == 4
    assert config.OUTPUT_DIR == "/tmp/elsewhere"


def test_negative_concurrency_is_rejected(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("MAX_CONCURRENCY: -3\n")

    with pytest.raises(ValidationError):
        load_config(str(path))


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.getLogger("hn_threads.test").makeRecord(
            "hn_threads.test", logging.ERROR, __file__, 1, "failed %s", ("x",),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "ERROR"
    assert payload["message"] == "failed x"
    assert payload["logger"] == "hn_threads.test"
    assert "ValueError: bad" in payload["exception"]


def test_setup_logging_does_not_stack_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging()
        setup_logging("DEBUG")
        ours = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)


def test_empty_yaml_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("REQUEST_TIMEOUT:\nOUTPUT_DIR:\nTOP_STORIES_LIMIT:\nLOG_LEVEL:\n")

    config = load_config(str(path))

    assert config.REQUEST_TIMEOUT == 30.0
    assert config.OUTPUT_DIR == "output"
    assert config.TOP_STORIES_LIMIT == 200
    assert config.LOG_LEVEL == "INFO"


def test_shipped_config_loads():
    config = load_config(str(Path(__file__).resolve().parent.parent / "resources" / "config.yml"))

    assert config.MAX_CONCURRENCY is None
    assert config.REQUEST_TIMEOUT == 30.0

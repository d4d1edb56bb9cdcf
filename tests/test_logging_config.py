import json
import logging
from pathlib import Path

from neuronorm.core.config import Settings
from neuronorm.core.logging import (
    JsonFormatter,
    correlation_context,
    get_correlation_id,
    get_logger,
)
from neuronorm.core.sentinels import NOT_AVAILABLE


def _record(message: str, **structured) -> logging.LogRecord:
    record = logging.LogRecord("neuronorm.test", logging.INFO, __file__, 1, message, None, None)
    record.structured_data = structured
    return record


def test_json_formatter_merges_structured_fields():
    payload = json.loads(JsonFormatter().format(_record("instrument_scored", instrument="BNTBR", age=30)))
    assert payload["message"] == "instrument_scored"
    assert payload["instrument"] == "BNTBR"
    assert payload["age"] == 30
    assert payload["level"] == "INFO"


def test_json_formatter_handles_sentinels_and_accents():
    line = JsonFormatter().format(_record("norm", value=NOT_AVAILABLE, label="Média"))
    payload = json.loads(line)
    assert payload["value"] == "NOT_AVAILABLE"
    assert "Média" in line


def test_correlation_id_is_bound_for_block():
    assert get_correlation_id() is None
    with correlation_context("abc") as cid:
        assert cid == "abc"
        payload = json.loads(JsonFormatter().format(_record("inside")))
        assert payload["correlation_id"] == "abc"
    assert get_correlation_id() is None


def test_structured_adapter_binds_defaults():
    logger = get_logger("neuronorm.test", component="tests")
    bound = logger.bind(instrument="FVA")
    msg, kwargs = bound.process("x", {"extra": {"structured_data": {"age": 9}}})
    assert kwargs["extra"]["structured_data"] == {"component": "tests", "instrument": "FVA", "age": 9}


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("CATALOG_DIR", raising=False)
    settings = Settings(_env_file=None)
    assert settings.catalog_dir is None
    assert settings.strict_monotonicity is True
    assert settings.is_production is False


def test_settings_read_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CATALOG_DIR", str(tmp_path))
    monkeypatch.setenv("STRICT_MONOTONICITY", "false")
    monkeypatch.setenv("ENVIRONMENT", "prod")
    settings = Settings(_env_file=None)
    assert settings.catalog_dir == Path(tmp_path)
    assert settings.strict_monotonicity is False
    assert settings.is_production is True


def test_blank_catalog_dir_means_packaged(monkeypatch):
    monkeypatch.setenv("CATALOG_DIR", "  ")
    assert Settings(_env_file=None).catalog_dir is None

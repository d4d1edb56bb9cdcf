from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import yaml
from fastapi.testclient import TestClient

from neuronorm.core.metrics import metrics_registry
from neuronorm.engine.registry import build_registry, get_registry
from neuronorm.engine.scoring import ScoringEngine
from neuronorm.main import app


@pytest.fixture(scope="session")
def registry():
    return get_registry()


@pytest.fixture()
def engine(registry):
    return ScoringEngine(registry)


@pytest.fixture()
def client():
    metrics_registry.reset()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def instrument_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for a one-variable instrument scored through the BNT-BR derivation."""

    def _build(bands=None, **overrides: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": "TST",
            "name": "Teste",
            "min_age": 6,
            "max_age": 99,
            "banding_scheme": "PERCENTILE_5",
            "derive": "neuronorm.instruments.bntbr.derive",
            "fields": [{"name": "acertos", "max": 30}],
            "scored_variables": ["ACERTOS"],
            "tables": {
                "ACERTOS": {
                    "direction": "ascending",
                    "bands": bands
                    if bands is not None
                    else [{"ages": [10, 99], "ranges": [[0, 9, 5], [10, 19, 50], [20, 30, 95]]}],
                }
            },
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture()
def make_catalog(tmp_path: Path) -> Callable[..., Path]:
    """Write instrument payloads plus a manifest into ``tmp_path`` and return the directory."""

    def _write(*instruments: Dict[str, Any], version: str = "test-1") -> Path:
        names = []
        for instrument in instruments:
            name = f"{instrument['code'].lower()}.yaml"
            (tmp_path / name).write_text(yaml.safe_dump(instrument, allow_unicode=True), encoding="utf-8")
            names.append(name)
        manifest = {"version": version, "instruments": names}
        (tmp_path / "manifest.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture()
def attention_catalog(make_catalog):
    """BPA-2 style battery normed only for ages 18-29, where net scores 10-17 map to P50."""

    ranges = [[None, 9, 25], [10, 17, 50], [18, None, 75]]
    fields = [
        {"name": f"{subtask}_{kind}"}
        for subtask in ("ac", "ad", "aa")
        for kind in ("acertos", "erros", "omissoes")
    ]
    payload = {
        "code": "ATTN",
        "name": "Atenção",
        "min_age": 6,
        "max_age": 81,
        "banding_scheme": "PERCENTILE_5",
        "derive": "neuronorm.instruments.bpa2.derive",
        "fields": fields,
        "scored_variables": ["AC", "AD", "AA", "AG"],
        "tables": {
            variable: {"bands": [{"ages": [18, 29], "ranges": ranges}]}
            for variable in ("AC", "AD", "AA", "AG")
        },
    }
    return make_catalog(payload, version="attn-1")


@pytest.fixture()
def attention_engine(attention_catalog):
    return ScoringEngine(build_registry(attention_catalog))

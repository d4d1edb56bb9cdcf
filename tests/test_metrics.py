import math

import pytest

from neuronorm.core.metrics import (
    count_calls,
    get_counters,
    get_histograms,
    get_metrics,
    inc_counter,
    instrumentation_enabled,
    measure_time,
    metrics_registry,
    set_instrumentation_enabled,
    timer,
)


@pytest.fixture(autouse=True)
def _clean_registry():
    metrics_registry.reset()
    previous = instrumentation_enabled()
    set_instrumentation_enabled(True)
    yield
    set_instrumentation_enabled(previous)
    metrics_registry.reset()


def test_timer_records_duration():
    with timer("metrics.test.timer"):
        pass
    snapshot = get_metrics()
    assert snapshot["metrics.test.timer"]["count"] == 1.0
    assert snapshot["metrics.test.timer"]["total_ms"] >= 0.0


def test_metrics_registry_tracks_stddev():
    metrics_registry.record("metrics.var", 10.0)
    metrics_registry.record("metrics.var", 30.0)
    entry = get_metrics()["metrics.var"]
    assert entry["count"] == 2.0
    assert entry["avg_ms"] == pytest.approx(20.0, rel=1e-3)
    assert entry["max_ms"] == 30.0
    assert entry["stddev_ms"] == pytest.approx(math.sqrt(200.0), rel=1e-3)


def test_measure_time_with_histogram():
    @measure_time("metrics.test.hist", histogram=True, buckets=(1000.0,))
    def _fn() -> int:
        return 7

    assert _fn() == 7
    assert get_metrics()["metrics.test.hist"]["count"] == 1.0
    assert get_histograms()["metrics.test.hist"] == {"1000.0": 1.0, "+Inf": 0.0}


def test_count_calls_and_reset():
    @count_calls("metrics.test.calls")
    def _fn() -> None:
        return None

    _fn()
    _fn()
    inc_counter("metrics.test.calls", 0.5)
    assert get_counters(reset=True)["metrics.test.calls"] == 2.5
    assert get_counters() == {}


def test_disabled_instrumentation_records_nothing():
    set_instrumentation_enabled(False)
    with timer("metrics.off"):
        pass
    inc_counter("metrics.off")
    assert get_metrics() == {}
    assert get_counters() == {}


def test_scoring_is_instrumented(engine):
    engine.score("BNTBR", 30, {"acertos": 22})
    assert get_counters()["scoring.score.calls"] == 1.0
    assert get_counters()["norms.lookup.calls"] == 1.0
    assert "scoring.score" in get_metrics()
    assert "scoring.score" in get_histograms()


def test_prefix_total_and_summary():
    inc_counter("http.score.requests")
    inc_counter("http.score.requests")
    inc_counter("recompute.applied")
    metrics_registry.record("scoring.score", 0.2)
    metrics_registry.record("registry.build", 4.0)
    assert metrics_registry.total("http.") == 2.0
    summary = metrics_registry.summary()
    assert summary["tracked_operations"] == 2
    assert summary["tracked_counters"] == 2
    assert summary["slowest_operation"] == "registry.build"

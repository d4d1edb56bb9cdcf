"""In-process counters and latency tracking for the scoring pipeline.

Labels are dotted names grouped by layer: ``scoring.*`` for the engine,
``norms.*`` for table lookups, ``registry.*`` for catalog builds,
``recompute.*`` for the recompute controller and ``http.*`` for requests.
``/health`` reports totals per prefix rather than every label.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import wraps
from math import sqrt
from time import perf_counter
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, TypeVar, cast

from neuronorm.core.config import settings

_F = TypeVar("_F", bound=Callable[..., Any])

# A full score runs in well under a millisecond; anything past 25ms is a cold catalog.
SCORING_BUCKETS_MS: tuple[float, ...] = (0.25, 1.0, 5.0, 25.0, 100.0)


@dataclass(slots=True)
class OperationTiming:
    count: float = 0.0
    total_ms: float = 0.0
    min_ms: Optional[float] = None
    max_ms: float = 0.0
    mean_ms: float = 0.0
    _sum_sq: float = 0.0

    def add(self, elapsed_ms: float) -> None:
        elapsed = float(elapsed_ms)
        self.count += 1.0
        self.total_ms += elapsed
        self.max_ms = max(self.max_ms, elapsed)
        self.min_ms = elapsed if self.min_ms is None else min(self.min_ms, elapsed)
        # Welford update keeps the variance stable over long runs.
        previous_mean = self.mean_ms
        self.mean_ms += (elapsed - previous_mean) / self.count
        self._sum_sq += (elapsed - previous_mean) * (elapsed - self.mean_ms)

    @property
    def stddev_ms(self) -> float:
        if self.count < 2.0 or self._sum_sq <= 0.0:
            return 0.0
        return sqrt(self._sum_sq / (self.count - 1.0))

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "total_ms": self.total_ms,
            "min_ms": self.min_ms if self.min_ms is not None else 0.0,
            "max_ms": self.max_ms,
            "avg_ms": self.mean_ms,
            "stddev_ms": self.stddev_ms,
        }


@dataclass(slots=True)
class LatencyHistogram:
    """Per-bucket (non-cumulative) counts keyed by the bucket's upper bound."""

    upper_bounds: tuple[float, ...]
    buckets: Dict[str, float] = field(init=False)

    def __post_init__(self) -> None:
        self.buckets = {str(bound): 0.0 for bound in sorted(self.upper_bounds)}
        self.buckets["+Inf"] = 0.0

    def add(self, elapsed_ms: float) -> None:
        key = next((str(bound) for bound in sorted(self.upper_bounds) if elapsed_ms <= bound), "+Inf")
        self.buckets[key] += 1.0

    def as_dict(self) -> Dict[str, float]:
        return dict(self.buckets)


class MetricsRegistry:
    """Lock-guarded store of timings, counters and latency histograms."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timings: Dict[str, OperationTiming] = {}
        self._counters: Dict[str, float] = {}
        self._histograms: Dict[str, LatencyHistogram] = {}

    def record(self, label: str, elapsed_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(label, OperationTiming()).add(elapsed_ms)

    def observe(self, label: str, elapsed_ms: float, buckets: Optional[Sequence[float]] = None) -> None:
        with self._lock:
            if label not in self._histograms:
                self._histograms[label] = LatencyHistogram(tuple(buckets or SCORING_BUCKETS_MS))
            self._histograms[label].add(elapsed_ms)

    def inc(self, label: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[label] = self._counters.get(label, 0.0) + float(amount)

    def timings(self, reset: bool = False) -> Dict[str, Dict[str, float]]:
        with self._lock:
            data = {label: timing.as_dict() for label, timing in self._timings.items()}
            if reset:
                self._timings.clear()
        return data

    def counters(self, reset: bool = False) -> Dict[str, float]:
        with self._lock:
            data = dict(self._counters)
            if reset:
                self._counters.clear()
        return data

    def histograms(self, reset: bool = False) -> Dict[str, Dict[str, float]]:
        with self._lock:
            data = {label: histogram.as_dict() for label, histogram in self._histograms.items()}
            if reset:
                self._histograms.clear()
        return data

    def total(self, prefix: str) -> float:
        """Sum of every counter whose label starts with ``prefix``."""
        with self._lock:
            return sum(value for label, value in self._counters.items() if label.startswith(prefix))

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            slowest = max(self._timings.items(), key=lambda item: item[1].mean_ms, default=None)
            return {
                "tracked_operations": len(self._timings),
                "tracked_counters": len(self._counters),
                "slowest_operation": slowest[0] if slowest else None,
                "slowest_avg_ms": round(slowest[1].mean_ms, 3) if slowest else None,
            }

    def reset(self) -> None:
        with self._lock:
            self._timings.clear()
            self._counters.clear()
            self._histograms.clear()


metrics_registry = MetricsRegistry()

_enabled: bool = bool(settings.debug_instrumentation_enabled)


def set_instrumentation_enabled(enabled: bool) -> None:
    global _enabled
    _enabled = bool(enabled)


def instrumentation_enabled() -> bool:
    return _enabled


@contextmanager
def timer(label: str) -> Iterator[None]:
    if not _enabled:
        yield
        return
    started = perf_counter()
    try:
        yield
    finally:
        metrics_registry.record(label, (perf_counter() - started) * 1000.0)


def measure_time(
    label: str,
    *,
    histogram: bool = False,
    buckets: Optional[Sequence[float]] = None,
) -> Callable[[_F], _F]:
    """Record each call's duration under ``label``; failed calls are timed too."""

    def decorator(func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not _enabled:
                return func(*args, **kwargs)
            started = perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (perf_counter() - started) * 1000.0
                metrics_registry.record(label, elapsed_ms)
                if histogram:
                    metrics_registry.observe(label, elapsed_ms, buckets)

        return cast(_F, wrapper)

    return decorator


def count_calls(label: str) -> Callable[[_F], _F]:
    def decorator(func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if _enabled:
                metrics_registry.inc(label)
            return func(*args, **kwargs)

        return cast(_F, wrapper)

    return decorator


def inc_counter(label: str, amount: float = 1.0) -> None:
    if _enabled:
        metrics_registry.inc(label, amount)


def get_metrics(reset: bool = False) -> Dict[str, Dict[str, float]]:
    return metrics_registry.timings(reset=reset)


def get_counters(reset: bool = False) -> Dict[str, float]:
    return metrics_registry.counters(reset=reset)


def get_histograms(reset: bool = False) -> Dict[str, Dict[str, float]]:
    return metrics_registry.histograms(reset=reset)


__all__ = [
    "MetricsRegistry",
    "SCORING_BUCKETS_MS",
    "count_calls",
    "get_counters",
    "get_histograms",
    "get_metrics",
    "inc_counter",
    "instrumentation_enabled",
    "measure_time",
    "metrics_registry",
    "set_instrumentation_enabled",
    "timer",
]

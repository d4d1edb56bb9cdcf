from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from neuronorm.core.numeric import clamp, normal_cdf, safe_round


class TableDirection(str, Enum):
    """Which way raw scores run for a normative table.

    ``ascending``: higher raw scores are better (counts of correct answers).
    ``descending``: lower raw scores are better (completion times).
    """

    ASCENDING = "ascending"
    DESCENDING = "descending"


def _lower_key(bound: Optional[float], inclusive: bool) -> tuple[float, int]:
    if bound is None:
        return (float("-inf"), 0)
    return (float(bound), 0 if inclusive else 1)


def _non_empty(
    lower: Optional[float],
    lower_inclusive: bool,
    upper: Optional[float],
    upper_inclusive: bool,
) -> bool:
    if lower is None or upper is None:
        return True
    if lower < upper:
        return True
    return lower == upper and lower_inclusive and upper_inclusive


@dataclass(frozen=True, slots=True)
class ScoreRange:
    """A raw-score sub-range mapped to one normative value.

    ``None`` bounds are unbounded. ``label`` is the published display range
    (e.g. ``"25-50"``) when the norm is reported as a percentile bracket.
    """

    lower: Optional[float]
    upper: Optional[float]
    value: float
    lower_inclusive: bool = True
    upper_inclusive: bool = True
    label: Optional[str] = None

    def contains(self, raw: float) -> bool:
        if self.lower is not None:
            if raw < self.lower or (raw == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if raw > self.upper or (raw == self.upper and not self.upper_inclusive):
                return False
        return True

    def is_empty(self) -> bool:
        return not _non_empty(self.lower, self.lower_inclusive, self.upper, self.upper_inclusive)

    def overlaps(self, other: "ScoreRange") -> bool:
        if _lower_key(self.lower, self.lower_inclusive) >= _lower_key(other.lower, other.lower_inclusive):
            lower, lower_inclusive = self.lower, self.lower_inclusive
        else:
            lower, lower_inclusive = other.lower, other.lower_inclusive
        if self.lower == other.lower:
            lower_inclusive = self.lower_inclusive and other.lower_inclusive

        if self.upper is None or (other.upper is not None and other.upper < self.upper):
            upper, upper_inclusive = other.upper, other.upper_inclusive
        else:
            upper, upper_inclusive = self.upper, self.upper_inclusive
        if self.upper == other.upper:
            upper_inclusive = self.upper_inclusive and other.upper_inclusive
        return _non_empty(lower, lower_inclusive, upper, upper_inclusive)

    def sort_key(self) -> tuple[float, int]:
        return _lower_key(self.lower, self.lower_inclusive)

    def describe(self) -> str:
        left = "[" if self.lower_inclusive and self.lower is not None else "("
        right = "]" if self.upper_inclusive and self.upper is not None else ")"
        low = "-inf" if self.lower is None else f"{self.lower:g}"
        high = "inf" if self.upper is None else f"{self.upper:g}"
        return f"{left}{low}, {high}{right}"


@dataclass(frozen=True, slots=True)
class NormalCurve:
    """Mean/SD norm evaluated at lookup time instead of per published cell.

    The percentile is ``100 * Phi(z)`` rounded half-up and clamped to 1-99.
    When lower raw scores are better (times, error counts) ``z`` is negated,
    so a fast time lands on a high percentile. ``min_raw``/``max_raw`` bound
    the scores the norm covers; ``None`` leaves that side open.
    """

    mean: float
    sd: float
    lower_is_better: bool = False
    min_raw: Optional[float] = None
    max_raw: Optional[float] = None

    def contains(self, raw: float) -> bool:
        if self.min_raw is not None and raw < self.min_raw:
            return False
        return self.max_raw is None or raw <= self.max_raw

    def z_score(self, raw: float) -> float:
        z = (raw - self.mean) / self.sd
        return -z if self.lower_is_better else z

    def percentile(self, raw: float) -> int:
        return int(safe_round(clamp(normal_cdf(self.z_score(raw)) * 100.0, 1.0, 99.0), 0))

    def describe(self) -> str:
        return f"N({self.mean:g}, {self.sd:g})"


@dataclass(frozen=True, slots=True)
class AgeBand:
    """Inclusive age interval (whole years) with its raw-score ranges.

    A band normed by mean and SD carries a ``curve`` and no ranges; its
    cell is computed for the exact raw score asked for.
    """

    min_age: int
    max_age: int
    ranges: tuple[ScoreRange, ...]
    stratifier: Optional[str] = None
    curve: Optional[NormalCurve] = None

    def contains_age(self, age: int) -> bool:
        return self.min_age <= age <= self.max_age

    def overlaps(self, other: "AgeBand") -> bool:
        return (
            self.stratifier == other.stratifier
            and self.min_age <= other.max_age
            and other.min_age <= self.max_age
        )

    def find_range(self, raw: float) -> Optional[ScoreRange]:
        if self.curve is not None:
            if not self.curve.contains(raw):
                return None
            return ScoreRange(lower=raw, upper=raw, value=self.curve.percentile(raw))
        for score_range in self.ranges:
            if score_range.contains(raw):
                return score_range
        return None

    def describe(self) -> str:
        span = f"{self.min_age}-{self.max_age}"
        return f"{span}/{self.stratifier}" if self.stratifier is not None else span


@dataclass(frozen=True, slots=True)
class NormativeTable:
    """All age bands published for one (instrument, variable) pair."""

    instrument_code: str
    variable: str
    bands: tuple[AgeBand, ...]
    direction: TableDirection = TableDirection.ASCENDING
    stratified: bool = False

    def band_for(self, age: int, stratifier: Optional[str] = None) -> Optional[AgeBand]:
        for band in self.bands:
            if not band.contains_age(age):
                continue
            if self.stratified and band.stratifier != stratifier:
                continue
            return band
        return None

    def lookup_range(self, age: int, raw: float, stratifier: Optional[str] = None) -> Optional[ScoreRange]:
        band = self.band_for(age, stratifier)
        if band is None:
            return None
        return band.find_range(raw)

    def context(self) -> str:
        return f"{self.instrument_code}.{self.variable}"

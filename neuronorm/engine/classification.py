"""Ordinal banding of normative values.

Two five-tier schemes cover every instrument in the catalog: one for
percentiles, one for standard scores (mean 100, SD 15). Each tier is closed at
its lower cut point and open at the next one, so every real number lands in
exactly one tier.

Example:
    >>> classify(BandingScheme.PERCENTILE_5, 25)
    <PercentileBand.MEDIA_INFERIOR: 'Média Inferior'>
    >>> classify(BandingScheme.STANDARD_SCORE_5, 85).value
    'Média'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from neuronorm.core.sentinels import NOT_AVAILABLE, NotAvailableType

__all__ = [
    "BandingScheme",
    "PercentileBand",
    "StandardScoreBand",
    "ClassificationBand",
    "Label",
    "SCHEME_BANDS",
    "ENGLISH_LABELS",
    "classify",
    "bands_for",
]


class BandingScheme(str, Enum):
    PERCENTILE_5 = "PERCENTILE_5"
    STANDARD_SCORE_5 = "STANDARD_SCORE_5"


class PercentileBand(str, Enum):
    INFERIOR = "Inferior"
    MEDIA_INFERIOR = "Média Inferior"
    MEDIA = "Média"
    MEDIA_SUPERIOR = "Média Superior"
    SUPERIOR = "Superior"


class StandardScoreBand(str, Enum):
    MUITO_BAIXA = "Muito Baixa"
    BAIXA = "Baixa"
    MEDIA = "Média"
    ALTA = "Alta"
    MUITO_ALTA = "Muito Alta"


Label = Union[PercentileBand, StandardScoreBand]


@dataclass(frozen=True, slots=True)
class ClassificationBand:
    """Half-open tier ``[lower, upper)``; ``None`` means unbounded."""

    lower: Optional[float]
    upper: Optional[float]
    label: Label

    def contains(self, value: float) -> bool:
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value >= self.upper:
            return False
        return True


def _partition(cuts: tuple[float, ...], labels: tuple[Label, ...]) -> tuple[ClassificationBand, ...]:
    if len(labels) != len(cuts) + 1:
        raise ValueError("A banding scheme needs exactly one more label than cut points")
    if list(cuts) != sorted(set(cuts)):
        raise ValueError("Cut points must be strictly increasing")
    bounds: list[Optional[float]] = [None, *cuts, None]
    return tuple(
        ClassificationBand(lower=bounds[index], upper=bounds[index + 1], label=label)
        for index, label in enumerate(labels)
    )


SCHEME_BANDS: Mapping[BandingScheme, tuple[ClassificationBand, ...]] = MappingProxyType(
    {
        BandingScheme.PERCENTILE_5: _partition((6, 26, 75, 95), tuple(PercentileBand)),
        BandingScheme.STANDARD_SCORE_5: _partition((70, 85, 115, 130), tuple(StandardScoreBand)),
    }
)

ENGLISH_LABELS: Mapping[Label, str] = MappingProxyType(
    {
        PercentileBand.INFERIOR: "Below average",
        PercentileBand.MEDIA_INFERIOR: "Low average",
        PercentileBand.MEDIA: "Average",
        PercentileBand.MEDIA_SUPERIOR: "High average",
        PercentileBand.SUPERIOR: "Superior",
        StandardScoreBand.MUITO_BAIXA: "Very low",
        StandardScoreBand.BAIXA: "Low",
        StandardScoreBand.MEDIA: "Average",
        StandardScoreBand.ALTA: "High",
        StandardScoreBand.MUITO_ALTA: "Very high",
    }
)


def bands_for(scheme: BandingScheme) -> tuple[ClassificationBand, ...]:
    return SCHEME_BANDS[BandingScheme(scheme)]


def classify(scheme: BandingScheme, value: Union[float, NotAvailableType]) -> Union[Label, NotAvailableType]:
    """Return the tier label for ``value`` or ``NOT_AVAILABLE`` when it has no norm."""

    if value is NOT_AVAILABLE:
        return NOT_AVAILABLE
    for band in bands_for(scheme):
        if band.contains(value):
            return band.label
    raise ValueError(f"Value {value!r} is not classifiable under {scheme}")

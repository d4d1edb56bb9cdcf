from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from neuronorm.core.sentinels import NOT_AVAILABLE, NotAvailableType
from neuronorm.engine.classification import BandingScheme, Label
from neuronorm.engine.norms.value_objects import NormativeTable

__all__ = [
    "DeriveFn",
    "FieldSpec",
    "StratifierSpec",
    "InstrumentDefinition",
    "ScoringResult",
]

DeriveFn = Callable[[Mapping[str, float], int], Mapping[str, float]]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A raw input field the examiner records on the answer sheet."""

    name: str
    label: str = ""
    maximum: Optional[float] = None
    integer: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label or self.name,
            "max": self.maximum,
            "integer": self.integer,
        }


@dataclass(frozen=True, slots=True)
class StratifierSpec:
    """Secondary key (schooling level, school type) selecting a norm group."""

    name: str
    values: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "values": list(self.values)}


@dataclass(frozen=True, slots=True)
class InstrumentDefinition:
    """Immutable catalog entry for one standardized test.

    The derivation is held as a plain function value; instruments differ by
    data, never by subclass.
    """

    code: str
    name: str
    min_age: int
    max_age: int
    fields: tuple[FieldSpec, ...]
    scored_variables: tuple[str, ...]
    derive: DeriveFn
    banding_scheme: BandingScheme
    tables: Mapping[str, NormativeTable]
    auxiliary_variables: tuple[str, ...] = ()
    stratifier: Optional[StratifierSpec] = None
    full_name: str = ""
    description: str = ""
    version: str = "1"

    @property
    def requires_stratifier(self) -> bool:
        return self.stratifier is not None

    def accepts_age(self, age: int) -> bool:
        return self.min_age <= age <= self.max_age

    def describe(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "full_name": self.full_name or self.name,
            "description": self.description,
            "version": self.version,
            "min_age": self.min_age,
            "max_age": self.max_age,
            "banding_scheme": self.banding_scheme.value,
            "requires_stratifier": self.requires_stratifier,
            "stratifier": self.stratifier.as_dict() if self.stratifier else None,
            "fields": [spec.as_dict() for spec in self.fields],
            "scored_variables": list(self.scored_variables),
            "auxiliary_variables": list(self.auxiliary_variables),
        }


NormEntry = Union[float, NotAvailableType]
LabelEntry = Union[Label, NotAvailableType]
RangeEntry = Union[str, NotAvailableType, None]


def _json_value(value: Any) -> Any:
    if value is NOT_AVAILABLE:
        return None
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True, slots=True)
class ScoringResult:
    """Outcome of one ``score`` call.

    ``normative_scores`` and ``classifications`` are keyed by scored variable
    in declaration order; a variable whose norms do not cover the subject holds
    ``NOT_AVAILABLE`` in both. ``derived_scores`` also lists auxiliary
    variables, which are never normed.
    """

    instrument_code: str
    subject_age: int
    stratifier_value: Optional[str]
    banding_scheme: BandingScheme
    derived_scores: Mapping[str, float]
    normative_scores: Mapping[str, NormEntry]
    classifications: Mapping[str, LabelEntry]
    percentile_ranges: Mapping[str, RangeEntry] = field(default_factory=lambda: MappingProxyType({}))
    notes: Optional[str] = None
    catalog_version: Optional[str] = None

    def is_available(self, variable: str) -> bool:
        return self.normative_scores.get(variable, NOT_AVAILABLE) is not NOT_AVAILABLE

    def unavailable_variables(self) -> tuple[str, ...]:
        return tuple(name for name, value in self.normative_scores.items() if value is NOT_AVAILABLE)

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly view; ``NOT_AVAILABLE`` becomes ``None`` and is listed in ``unavailable``."""

        return {
            "instrument_code": self.instrument_code,
            "subject_age": self.subject_age,
            "stratifier_value": self.stratifier_value,
            "banding_scheme": self.banding_scheme.value,
            "derived_scores": dict(self.derived_scores),
            "normative_scores": {key: _json_value(val) for key, val in self.normative_scores.items()},
            "classifications": {key: _json_value(val) for key, val in self.classifications.items()},
            "percentile_ranges": {key: _json_value(val) for key, val in self.percentile_ranges.items()},
            "unavailable": list(self.unavailable_variables()),
            "notes": self.notes,
            "catalog_version": self.catalog_version,
        }

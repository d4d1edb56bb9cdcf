from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

__all__ = [
    "ScoreRequest",
    "ScoreResponse",
    "FieldSummary",
    "StratifierSummary",
    "InstrumentSummary",
    "InstrumentList",
]


class ScoreRequest(BaseModel):
    """Scoring request body.

    ``age`` and ``raw_inputs`` are taken as sent; the engine validates them and
    answers with a tagged ``invalid_input`` naming the offending field, so
    booleans, numeric strings and nulls are rejected rather than coerced.
    """

    age: Any = Field(description="Subject age in whole years", examples=[30])
    stratifier: Optional[str] = Field(
        default=None,
        description="Norm group key for stratified instruments (e.g. escolaridade, tipo_escola)",
    )
    raw_inputs: Dict[str, Any] = Field(default_factory=dict, examples=[{"acertos": 22}])
    notes: Optional[str] = None


class ScoreResponse(BaseModel):
    """Scoring result; variables without norms are ``null`` and listed in ``unavailable``."""

    instrument_code: str
    subject_age: int
    stratifier_value: Optional[str] = None
    banding_scheme: str
    derived_scores: Dict[str, float]
    normative_scores: Dict[str, Optional[float]]
    classifications: Dict[str, Optional[str]]
    percentile_ranges: Dict[str, Optional[str]]
    unavailable: List[str]
    notes: Optional[str] = None
    catalog_version: Optional[str] = None


class FieldSummary(BaseModel):
    name: str
    label: str
    max: Optional[float] = None
    integer: bool = True


class StratifierSummary(BaseModel):
    name: str
    values: List[str]


class InstrumentSummary(BaseModel):
    code: str
    name: str
    full_name: str
    description: str
    version: str
    min_age: int
    max_age: int
    banding_scheme: str
    requires_stratifier: bool
    stratifier: Optional[StratifierSummary] = None
    fields: List[FieldSummary]
    scored_variables: List[str]
    auxiliary_variables: List[str]


class InstrumentList(BaseModel):
    catalog_version: Optional[str] = None
    instruments: List[InstrumentSummary]

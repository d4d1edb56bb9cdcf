from __future__ import annotations

from typing import List

from neuronorm.core.logging import get_logger
from neuronorm.engine.scoring import ScoringEngine
from neuronorm.schemas.score import InstrumentList, InstrumentSummary, ScoreRequest, ScoreResponse

logger = get_logger("neuronorm.services.scoring", component="services")

__all__ = [
    "score_request",
    "describe_instrument",
    "list_instruments",
    "list_instruments_for_age",
]


def score_request(engine: ScoringEngine, instrument_code: str, payload: ScoreRequest) -> ScoreResponse:
    """Run one scoring request and convert the result to its response schema.

    Domain errors propagate unchanged; the exception handler renders them.
    """
    result = engine.score(
        instrument_code,
        payload.age,
        payload.raw_inputs,
        stratifier_value=payload.stratifier,
        notes=payload.notes,
    )
    return ScoreResponse.model_validate(result.as_dict())


def describe_instrument(engine: ScoringEngine, instrument_code: str) -> InstrumentSummary:
    return InstrumentSummary.model_validate(engine.describe(instrument_code))


def _summaries(definitions) -> List[InstrumentSummary]:
    return [InstrumentSummary.model_validate(definition.describe()) for definition in definitions]


def list_instruments(engine: ScoringEngine) -> InstrumentList:
    registry = engine.registry
    return InstrumentList(catalog_version=registry.catalog_version, instruments=_summaries(registry))


def list_instruments_for_age(engine: ScoringEngine, age: int) -> InstrumentList:
    """Instruments whose published age range includes ``age``."""

    return InstrumentList(
        catalog_version=engine.registry.catalog_version,
        instruments=_summaries(engine.instruments_for_age(age)),
    )

"""Scoring orchestrator.

``score`` runs one request end to end: instrument lookup, input checks,
derivation, normative lookup and classification. It keeps no state between
calls; two calls with equal arguments against the same registry return equal
results.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from neuronorm.core.errors import AgeOutOfRangeError, ConfigurationError, MissingStratifierError
from neuronorm.core.logging import get_logger
from neuronorm.core.metrics import count_calls, measure_time
from neuronorm.core.sentinels import NOT_AVAILABLE
from neuronorm.engine.classification import classify
from neuronorm.engine.registry import InstrumentRegistry, get_registry
from neuronorm.engine.types import InstrumentDefinition, ScoringResult
from neuronorm.engine.validation import validate_age, validate_raw_inputs
from neuronorm.i18n.pt_messages import CatalogMessages, ScoringErrorMessages

__all__ = ["ScoringEngine", "score", "get_engine"]

logger = get_logger("neuronorm.engine.scoring", component="scoring")


class ScoringEngine:
    """Stateless scoring front end over an :class:`InstrumentRegistry`."""

    def __init__(self, registry: InstrumentRegistry) -> None:
        self.registry = registry

    def instruments_for_age(self, age: Any) -> tuple[InstrumentDefinition, ...]:
        return self.registry.for_age(validate_age(age))

    def describe(self, instrument_code: str) -> dict[str, Any]:
        return self.registry.get(instrument_code).describe()

    def _check_age(self, definition: InstrumentDefinition, age: Any) -> int:
        subject_age = validate_age(age)
        if not definition.accepts_age(subject_age):
            raise AgeOutOfRangeError(
                ScoringErrorMessages.AGE_OUT_OF_RANGE.format(
                    age=subject_age,
                    code=definition.code,
                    min_age=definition.min_age,
                    max_age=definition.max_age,
                ),
                field="age",
                value=subject_age,
            )
        return subject_age

    def _check_stratifier(self, definition: InstrumentDefinition, stratifier_value: Optional[str]) -> Optional[str]:
        if stratifier_value == "":
            stratifier_value = None
        spec = definition.stratifier
        if spec is None:
            return stratifier_value
        if stratifier_value is None:
            raise MissingStratifierError(
                ScoringErrorMessages.MISSING_STRATIFIER.format(
                    code=definition.code,
                    name=spec.name,
                    values=", ".join(spec.values),
                ),
                field=spec.name,
                value=None,
            )
        if stratifier_value not in spec.values:
            # No norm group matches; every variable comes back NOT_AVAILABLE.
            logger.warning(
                "unknown_stratifier_value",
                extra={
                    "structured_data": {
                        "instrument": definition.code,
                        "stratifier": spec.name,
                        "value": stratifier_value,
                        "expected": list(spec.values),
                    }
                },
            )
        return stratifier_value

    def _derive(self, definition: InstrumentDefinition, raw: Mapping[str, float], age: int) -> Mapping[str, float]:
        derived = dict(definition.derive(raw, age))
        expected = definition.scored_variables + definition.auxiliary_variables
        missing = [name for name in expected if name not in derived]
        if missing:
            raise ConfigurationError(
                CatalogMessages.DERIVATION_CONTRACT.format(code=definition.code, missing=", ".join(missing)),
                detail={"code": definition.code, "missing": missing},
            )
        return MappingProxyType({name: derived[name] for name in expected})

    @count_calls("scoring.score.calls")
    @measure_time("scoring.score", histogram=True)
    def score(
        self,
        instrument_code: str,
        age: Any,
        raw_inputs: Mapping[str, Any],
        stratifier_value: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ScoringResult:
        """Score one set of raw responses.

        Checks run in a fixed order and the first failure is raised:
        unknown instrument, invalid or out-of-range age, missing stratifier,
        invalid raw input. Variables whose norms do not cover the subject are
        ``NOT_AVAILABLE`` in the result rather than errors.

        Raises:
            UnknownInstrumentError, AgeOutOfRangeError, MissingStratifierError,
            InvalidInputError: all subclasses of ``ScoringError``.
        """
        definition = self.registry.get(instrument_code)
        subject_age = self._check_age(definition, age)
        stratifier = self._check_stratifier(definition, stratifier_value)
        raw = validate_raw_inputs(definition, raw_inputs)
        derived = self._derive(definition, raw, subject_age)

        lookup_stratifier = stratifier if definition.requires_stratifier else None
        normative: Dict[str, Any] = {}
        labels: Dict[str, Any] = {}
        ranges: Dict[str, Any] = {}
        for variable in definition.scored_variables:
            cell = self.registry.store.lookup_range(
                definition.code, variable, subject_age, derived[variable], lookup_stratifier
            )
            if cell is None:
                normative[variable] = NOT_AVAILABLE
                ranges[variable] = NOT_AVAILABLE
            else:
                normative[variable] = cell.value
                ranges[variable] = cell.label
            labels[variable] = classify(definition.banding_scheme, normative[variable])

        result = ScoringResult(
            instrument_code=definition.code,
            subject_age=subject_age,
            stratifier_value=stratifier,
            banding_scheme=definition.banding_scheme,
            derived_scores=derived,
            normative_scores=MappingProxyType(normative),
            classifications=MappingProxyType(labels),
            percentile_ranges=MappingProxyType(ranges),
            notes=notes,
            catalog_version=self.registry.catalog_version,
        )
        logger.info(
            "instrument_scored",
            extra={
                "structured_data": {
                    "instrument": definition.code,
                    "age": subject_age,
                    "stratifier": stratifier,
                    "unavailable": list(result.unavailable_variables()),
                }
            },
        )
        return result


def get_engine() -> ScoringEngine:
    return ScoringEngine(get_registry())


def score(
    instrument_code: str,
    age: Any,
    raw_inputs: Mapping[str, Any],
    stratifier_value: Optional[str] = None,
    notes: Optional[str] = None,
) -> ScoringResult:
    """Score against the process-wide registry built from the configured catalog."""

    return get_engine().score(instrument_code, age, raw_inputs, stratifier_value, notes)

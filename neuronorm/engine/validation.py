from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Mapping

from neuronorm.core.errors import InvalidInputError
from neuronorm.core.numeric import is_real_number
from neuronorm.engine.types import FieldSpec, InstrumentDefinition
from neuronorm.i18n.pt_messages import ScoringErrorMessages

__all__ = ["validate_age", "validate_field", "validate_raw_inputs"]


def validate_age(age: Any) -> int:
    """Accept whole, non-negative ages; integral floats such as ``9.0`` are normalized."""

    if not is_real_number(age) or not math.isfinite(age) or age < 0 or int(age) != age:
        raise InvalidInputError(ScoringErrorMessages.INVALID_AGE, field="age", value=age)
    return int(age)


def validate_field(spec: FieldSpec, value: Any) -> float:
    name = spec.name
    if not is_real_number(value):
        raise InvalidInputError(ScoringErrorMessages.NOT_NUMERIC.format(field=name), field=name, value=value)
    if not math.isfinite(value):
        raise InvalidInputError(ScoringErrorMessages.NOT_FINITE.format(field=name), field=name, value=value)
    if value < 0:
        raise InvalidInputError(ScoringErrorMessages.NEGATIVE_VALUE.format(field=name), field=name, value=value)
    if spec.integer and int(value) != value:
        raise InvalidInputError(ScoringErrorMessages.NOT_INTEGER.format(field=name), field=name, value=value)
    if spec.maximum is not None and value > spec.maximum:
        raise InvalidInputError(
            ScoringErrorMessages.ABOVE_MAXIMUM.format(field=name, maximum=f"{spec.maximum:g}"),
            field=name,
            value=value,
        )
    return int(value) if spec.integer else value


def validate_raw_inputs(definition: InstrumentDefinition, raw_inputs: Mapping[str, Any]) -> Mapping[str, float]:
    """Check every declared field in declaration order and return a read-only copy.

    Fields the instrument does not declare are dropped; the first invalid
    declared field raises :class:`InvalidInputError` naming it.
    """
    if not isinstance(raw_inputs, Mapping):
        raise InvalidInputError(
            ScoringErrorMessages.NOT_NUMERIC.format(field="raw_inputs"),
            field="raw_inputs",
            value=type(raw_inputs).__name__,
        )
    cleaned: dict[str, float] = {}
    for spec in definition.fields:
        if spec.name not in raw_inputs or raw_inputs[spec.name] is None:
            raise InvalidInputError(
                ScoringErrorMessages.MISSING_FIELD.format(field=spec.name),
                field=spec.name,
                value=None,
            )
        cleaned[spec.name] = validate_field(spec, raw_inputs[spec.name])
    return MappingProxyType(cleaned)

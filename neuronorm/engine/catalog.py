"""Catalog loading: YAML reference data compiled into instrument definitions.

The packaged catalog is a ``manifest.yaml`` naming a catalog version and the
instrument files to load, in order. Each instrument file declares metadata,
raw fields, a dotted path to its derivation function and one table per scored
variable. Tables are written in whichever form the published manual uses and
are compiled here into explicit raw-score ranges:

``ranges``
    Explicit ``[lower, upper, value]`` rows (inclusive unless flagged).
``cells``
    Exact ``raw: value`` pairs; ``null`` values are left out.
``floor``
    Ascending anchors ``[anchor, value, label?]``: the value applies from the
    anchor up to the next anchor; ``below`` covers scores under the first one.
``ceiling``
    Anchors for timed tasks ``[anchor, value, label?]``: the value applies up
    to and including the anchor; ``above`` covers scores past the last one.
``normal``
    ``mean``/``sd`` evaluated for the exact raw score at lookup time, as a
    percentile clamped to 1-99. A ``descending`` table reads the curve as
    lower-is-better. Optional ``min_raw``/``max_raw`` bound the covered scores.

Where two anchors share a score, the more favorable value wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from neuronorm.catalog import CATALOG_DIR
from neuronorm.core.errors import ConfigurationError, TableIntegrityError
from neuronorm.engine.classification import BandingScheme
from neuronorm.engine.norms.integrity import validate_table
from neuronorm.engine.norms.value_objects import AgeBand, NormalCurve, NormativeTable, ScoreRange, TableDirection
from neuronorm.engine.types import FieldSpec, InstrumentDefinition, StratifierSpec
from neuronorm.i18n.pt_messages import CatalogMessages

__all__ = [
    "ComponentResolutionError",
    "ComponentRef",
    "Catalog",
    "TABLE_FORMS",
    "compile_band",
    "compile_table",
    "parse_instrument",
    "load_instrument_file",
    "load_catalog",
]

MANIFEST_NAME = "manifest.yaml"
TABLE_FORMS: tuple[str, ...] = ("ranges", "cells", "floor", "ceiling", "normal")


class ComponentResolutionError(ConfigurationError):
    error_code = "component_resolution_error"


@dataclass(frozen=True)
class ComponentRef:
    dotted_path: str

    def resolve(self) -> object:
        try:
            module_name, attribute = self.dotted_path.rsplit(".", 1)
        except ValueError as exc:
            raise ComponentResolutionError(
                CatalogMessages.COMPONENT_PATH_INVALID.format(path=self.dotted_path)
            ) from exc
        try:
            module = import_module(module_name)
        except ImportError as exc:
            raise ComponentResolutionError(
                CatalogMessages.COMPONENT_NOT_FOUND.format(component=self.dotted_path)
            ) from exc
        try:
            return getattr(module, attribute)
        except AttributeError as exc:
            raise ComponentResolutionError(
                CatalogMessages.COMPONENT_NOT_FOUND.format(component=self.dotted_path)
            ) from exc


@dataclass(frozen=True)
class Catalog:
    version: str
    instruments: tuple[InstrumentDefinition, ...]
    source: Optional[Path] = None


def _malformed(context: str, message: str) -> TableIntegrityError:
    return TableIntegrityError(message, detail={"context": context})


def _require_mapping(payload: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise _malformed(context, CatalogMessages.OBJECT_REQUIRED.format(context=context))
    return payload


def _require(payload: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in payload or payload[key] is None:
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field=key))
    return payload[key]


def _number(value: Any, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _malformed(context, CatalogMessages.NUMBER_REQUIRED.format(context=context, value=value))
    return value


def _optional_number(value: Any, context: str) -> Optional[float]:
    return None if value is None else _number(value, context)


def _whole_number(value: Any, context: str) -> int:
    number = _number(value, context)
    if int(number) != number:
        raise _malformed(context, CatalogMessages.NUMBER_REQUIRED.format(context=context, value=value))
    return int(number)


def _split_step(step: Any, context: str) -> tuple[float, float, Optional[str]]:
    if not isinstance(step, Sequence) or isinstance(step, str) or len(step) not in (2, 3):
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="[anchor, value, label?]"))
    label = str(step[2]) if len(step) == 3 and step[2] is not None else None
    return _number(step[0], context), _number(step[1], context), label


def _split_edge(edge: Any, context: str) -> tuple[float, Optional[str]]:
    if isinstance(edge, Sequence) and not isinstance(edge, str):
        if len(edge) != 2:
            raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="[value, label]"))
        return _number(edge[0], context), (str(edge[1]) if edge[1] is not None else None)
    return _number(edge, context), None


def _collapse(steps: List[tuple[float, float, Optional[str]]], context: str) -> List[tuple[float, float, Optional[str]]]:
    if not steps:
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="steps"))
    collapsed: List[tuple[float, float, Optional[str]]] = []
    for step in sorted(steps, key=lambda item: item[0]):
        if collapsed and collapsed[-1][0] == step[0]:
            if step[1] > collapsed[-1][1]:
                collapsed[-1] = step
            continue
        collapsed.append(step)
    return collapsed


def _compile_ranges(rows: Any, context: str) -> List[ScoreRange]:
    if not isinstance(rows, Sequence) or isinstance(rows, str):
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="ranges"))
    compiled: List[ScoreRange] = []
    for row in rows:
        if isinstance(row, Mapping):
            compiled.append(
                ScoreRange(
                    lower=_optional_number(row.get("lower"), context),
                    upper=_optional_number(row.get("upper"), context),
                    value=_number(_require(row, "value", context), context),
                    lower_inclusive=bool(row.get("lower_inclusive", True)),
                    upper_inclusive=bool(row.get("upper_inclusive", True)),
                    label=str(row["label"]) if row.get("label") is not None else None,
                )
            )
        elif isinstance(row, Sequence) and not isinstance(row, str) and len(row) in (3, 4):
            compiled.append(
                ScoreRange(
                    lower=_optional_number(row[0], context),
                    upper=_optional_number(row[1], context),
                    value=_number(row[2], context),
                    label=str(row[3]) if len(row) == 4 else None,
                )
            )
        else:
            raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="[lower, upper, value]"))
    return compiled


def _compile_cells(cells: Any, context: str) -> List[ScoreRange]:
    mapping = _require_mapping(cells, context)
    compiled = []
    for raw, value in mapping.items():
        if value is None:
            continue
        point = _number(raw, context)
        compiled.append(ScoreRange(lower=point, upper=point, value=_number(value, context)))
    return compiled


def _compile_floor(spec: Any, context: str) -> List[ScoreRange]:
    payload = _require_mapping(spec, context)
    steps = _collapse(
        [_split_step(step, context) for step in _require(payload, "steps", context)],
        context,
    )
    compiled: List[ScoreRange] = []
    if payload.get("below") is not None:
        value, label = _split_edge(payload["below"], context)
        compiled.append(ScoreRange(lower=None, upper=steps[0][0], value=value, upper_inclusive=False, label=label))
    for index, (anchor, value, label) in enumerate(steps):
        upper = steps[index + 1][0] if index + 1 < len(steps) else None
        compiled.append(
            ScoreRange(lower=anchor, upper=upper, value=value, upper_inclusive=False, label=label)
        )
    return compiled


def _compile_ceiling(spec: Any, context: str) -> List[ScoreRange]:
    payload = _require_mapping(spec, context)
    steps = _collapse(
        [_split_step(step, context) for step in _require(payload, "steps", context)],
        context,
    )
    compiled: List[ScoreRange] = []
    for index, (anchor, value, label) in enumerate(steps):
        lower = steps[index - 1][0] if index > 0 else None
        compiled.append(
            ScoreRange(lower=lower, upper=anchor, value=value, lower_inclusive=False, label=label)
        )
    if payload.get("above") is not None:
        value, label = _split_edge(payload["above"], context)
        compiled.append(ScoreRange(lower=steps[-1][0], upper=None, value=value, lower_inclusive=False, label=label))
    return compiled


def _compile_normal(spec: Any, context: str, direction: TableDirection) -> NormalCurve:
    payload = _require_mapping(spec, context)
    sd = _number(_require(payload, "sd", context), context)
    if sd <= 0:
        raise _malformed(context, CatalogMessages.NON_POSITIVE_SD.format(context=context, sd=sd))
    return NormalCurve(
        mean=_number(_require(payload, "mean", context), context),
        sd=sd,
        lower_is_better=direction is TableDirection.DESCENDING,
        min_raw=_optional_number(payload.get("min_raw"), context),
        max_raw=_optional_number(payload.get("max_raw"), context),
    )


_COMPILERS = {
    "ranges": _compile_ranges,
    "cells": _compile_cells,
    "floor": _compile_floor,
    "ceiling": _compile_ceiling,
}


def compile_band(
    payload: Mapping[str, Any],
    context: str,
    direction: TableDirection = TableDirection.ASCENDING,
) -> AgeBand:
    """Compile one YAML band (``ages`` plus exactly one table form) into an :class:`AgeBand`."""

    band = _require_mapping(payload, context)
    ages = _require(band, "ages", context)
    if not isinstance(ages, Sequence) or isinstance(ages, str) or len(ages) != 2:
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="ages: [min, max]"))
    min_age, max_age = _whole_number(ages[0], context), _whole_number(ages[1], context)
    stratifier = band.get("stratifier")
    band_context = f"{context}[{min_age}-{max_age}{'/' + str(stratifier) if stratifier else ''}]"
    forms = [form for form in TABLE_FORMS if form in band]
    if len(forms) != 1:
        raise _malformed(
            band_context,
            CatalogMessages.UNKNOWN_TABLE_FORM.format(context=band_context, forms=", ".join(TABLE_FORMS)),
        )
    curve: Optional[NormalCurve] = None
    ranges: List[ScoreRange] = []
    if forms[0] == "normal":
        curve = _compile_normal(band["normal"], band_context, direction)
    else:
        ranges = _COMPILERS[forms[0]](band[forms[0]], band_context)
    return AgeBand(
        min_age=min_age,
        max_age=max_age,
        ranges=tuple(sorted(ranges, key=lambda item: item.sort_key())),
        stratifier=str(stratifier) if stratifier is not None else None,
        curve=curve,
    )


def compile_table(
    instrument_code: str,
    variable: str,
    payload: Mapping[str, Any],
    *,
    stratified: bool,
) -> NormativeTable:
    context = f"{instrument_code}.{variable}"
    spec = _require_mapping(payload, context)
    direction_value = spec.get("direction", TableDirection.ASCENDING.value)
    try:
        direction = TableDirection(direction_value)
    except ValueError as exc:
        raise _malformed(
            context, CatalogMessages.UNKNOWN_DIRECTION.format(context=context, direction=direction_value)
        ) from exc
    bands = _require(spec, "bands", context)
    if not isinstance(bands, Sequence) or isinstance(bands, str):
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="bands"))
    return NormativeTable(
        instrument_code=instrument_code,
        variable=variable,
        bands=tuple(compile_band(band, context, direction) for band in bands),
        direction=direction,
        stratified=stratified,
    )


def _parse_fields(payload: Any, context: str) -> tuple[FieldSpec, ...]:
    if not isinstance(payload, Sequence) or isinstance(payload, str) or not payload:
        raise _malformed(context, CatalogMessages.FIELD_REQUIRED.format(context=context, field="fields"))
    fields = []
    for entry in payload:
        item = _require_mapping(entry, context)
        maximum = item.get("max")
        fields.append(
            FieldSpec(
                name=str(_require(item, "name", context)),
                label=str(item.get("label") or ""),
                maximum=_number(maximum, context) if maximum is not None else None,
                integer=bool(item.get("integer", True)),
            )
        )
    return tuple(fields)


def parse_instrument(payload: Any, *, strict_monotonicity: bool = True) -> InstrumentDefinition:
    """Build and validate one :class:`InstrumentDefinition` from parsed YAML.

    Raises:
        TableIntegrityError: when the declaration or any of its tables is inconsistent.
        ComponentResolutionError: when the derivation path cannot be imported.
    """
    spec = _require_mapping(payload, "instrument")
    code = str(_require(spec, "code", "instrument"))
    min_age = _whole_number(_require(spec, "min_age", code), code)
    max_age = _whole_number(_require(spec, "max_age", code), code)
    if min_age > max_age:
        raise _malformed(code, CatalogMessages.INVERTED_AGE_BAND.format(context=code))

    scheme_value = _require(spec, "banding_scheme", code)
    try:
        scheme = BandingScheme(scheme_value)
    except ValueError as exc:
        raise _malformed(code, CatalogMessages.UNKNOWN_SCHEME.format(context=code, scheme=scheme_value)) from exc

    derive_path = str(_require(spec, "derive", code))
    derive = ComponentRef(derive_path).resolve()
    if not callable(derive):
        raise ComponentResolutionError(CatalogMessages.COMPONENT_NOT_CALLABLE.format(component=derive_path))

    stratifier: Optional[StratifierSpec] = None
    if spec.get("stratifier") is not None:
        strat = _require_mapping(spec["stratifier"], f"{code}.stratifier")
        stratifier = StratifierSpec(
            name=str(_require(strat, "name", f"{code}.stratifier")),
            values=tuple(str(value) for value in _require(strat, "values", f"{code}.stratifier")),
        )

    scored = tuple(str(name) for name in _require(spec, "scored_variables", code))
    auxiliary = tuple(str(name) for name in spec.get("auxiliary_variables") or ())
    raw_tables = _require_mapping(_require(spec, "tables", code), f"{code}.tables")

    tables: Dict[str, NormativeTable] = {}
    for variable in raw_tables:
        if variable not in scored:
            raise _malformed(code, CatalogMessages.UNDECLARED_TABLE.format(code=code, variable=variable))
    for variable in scored:
        if variable not in raw_tables:
            raise _malformed(code, CatalogMessages.MISSING_TABLE.format(code=code, variable=variable))
        table = compile_table(code, variable, raw_tables[variable], stratified=stratifier is not None)
        validate_table(
            table,
            min_age=min_age,
            max_age=max_age,
            stratifier_values=stratifier.values if stratifier else (),
            strict_monotonicity=strict_monotonicity,
        )
        tables[variable] = table

    return InstrumentDefinition(
        code=code,
        name=str(spec.get("name") or code),
        full_name=str(spec.get("full_name") or ""),
        description=str(spec.get("description") or ""),
        version=str(spec.get("version") or "1"),
        min_age=min_age,
        max_age=max_age,
        fields=_parse_fields(_require(spec, "fields", code), code),
        scored_variables=scored,
        auxiliary_variables=auxiliary,
        derive=derive,
        banding_scheme=scheme,
        stratifier=stratifier,
        tables=MappingProxyType(tables),
    )


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def load_instrument_file(path: Path, *, strict_monotonicity: bool = True) -> InstrumentDefinition:
    return parse_instrument(_read_yaml(path), strict_monotonicity=strict_monotonicity)


def load_catalog(directory: Optional[Path] = None, *, strict_monotonicity: bool = True) -> Catalog:
    """Load every instrument listed in ``<directory>/manifest.yaml``.

    Args:
        directory: Catalog directory; the packaged catalog when omitted.
        strict_monotonicity: Forwarded to the table integrity checks.
    """
    base = Path(directory) if directory is not None else CATALOG_DIR
    manifest_path = base / MANIFEST_NAME
    if not manifest_path.is_file():
        raise ConfigurationError(CatalogMessages.MANIFEST_MISSING.format(path=manifest_path))
    manifest = _require_mapping(_read_yaml(manifest_path), str(manifest_path))
    files: Iterable[Any] = manifest.get("instruments") or ()
    files = [str(name) for name in files]
    if not files:
        raise ConfigurationError(CatalogMessages.MANIFEST_INSTRUMENTS_REQUIRED)
    instruments = tuple(
        load_instrument_file(base / name, strict_monotonicity=strict_monotonicity) for name in files
    )
    return Catalog(version=str(manifest.get("version") or "0"), instruments=instruments, source=base)

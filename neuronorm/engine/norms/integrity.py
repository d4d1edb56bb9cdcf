"""Construction-time integrity checks for normative tables.

Every check raises :class:`TableIntegrityError`; nothing here runs on the
scoring path, so a table that passes is safe to look up without re-checking.
"""

from __future__ import annotations

from itertools import combinations
from typing import Iterable, Optional, Sequence

from neuronorm.core.errors import TableIntegrityError
from neuronorm.engine.norms.value_objects import AgeBand, NormativeTable, TableDirection
from neuronorm.i18n.pt_messages import CatalogMessages

__all__ = ["validate_table", "validate_band_ranges"]


def _fail(message: str, **detail: object) -> TableIntegrityError:
    return TableIntegrityError(message, detail=detail or None)


def _validate_curve(context: str, band: AgeBand, direction: TableDirection, strict_monotonicity: bool) -> None:
    curve = band.curve
    band_context = f"{context}[{band.describe()}]"
    if band.ranges:
        raise _fail(CatalogMessages.CURVE_WITH_RANGES.format(context=band_context))
    if not curve.sd > 0:
        raise _fail(CatalogMessages.NON_POSITIVE_SD.format(context=band_context, sd=curve.sd))
    if curve.min_raw is not None and curve.max_raw is not None and curve.min_raw > curve.max_raw:
        raise _fail(
            CatalogMessages.INVERTED_RANGE.format(context=band_context, range=f"[{curve.min_raw:g}, {curve.max_raw:g}]")
        )
    if strict_monotonicity and curve.lower_is_better != (direction is TableDirection.DESCENDING):
        raise _fail(
            CatalogMessages.CURVE_DIRECTION.format(
                context=band_context, curve=curve.describe(), direction=direction.value
            )
        )


def validate_band_ranges(
    context: str,
    band: AgeBand,
    *,
    direction: TableDirection,
    strict_monotonicity: bool,
) -> None:
    """Check one band: non-empty, no inverted or overlapping ranges, ordered values."""

    if band.curve is not None:
        _validate_curve(context, band, direction, strict_monotonicity)
        return
    if not band.ranges:
        raise _fail(CatalogMessages.EMPTY_BAND.format(context=f"{context}[{band.describe()}]"))
    band_context = f"{context}[{band.describe()}]"
    for score_range in band.ranges:
        if score_range.is_empty():
            raise _fail(
                CatalogMessages.INVERTED_RANGE.format(context=band_context, range=score_range.describe())
            )
    ordered = sorted(band.ranges, key=lambda item: item.sort_key())
    for first, second in combinations(ordered, 2):
        if first.overlaps(second):
            raise _fail(
                CatalogMessages.OVERLAPPING_RANGES.format(
                    context=band_context, first=first.describe(), second=second.describe()
                )
            )
    if not strict_monotonicity:
        return
    for first, second in zip(ordered, ordered[1:]):
        if direction is TableDirection.ASCENDING and second.value < first.value:
            broken = True
        elif direction is TableDirection.DESCENDING and second.value > first.value:
            broken = True
        else:
            broken = False
        if broken:
            raise _fail(
                CatalogMessages.NON_MONOTONIC.format(
                    context=band_context,
                    direction=direction.value,
                    first=f"{first.describe()}={first.value:g}",
                    second=f"{second.describe()}={second.value:g}",
                )
            )


def _check_stratifiers(
    table: NormativeTable,
    band: AgeBand,
    stratifier_values: Sequence[str],
) -> None:
    context = table.context()
    if not table.stratified:
        if band.stratifier is not None:
            raise _fail(CatalogMessages.STRATIFIER_NOT_EXPECTED.format(context=context, value=band.stratifier))
        return
    if band.stratifier is None:
        raise _fail(CatalogMessages.STRATIFIER_REQUIRED.format(context=f"{context}[{band.describe()}]"))
    if stratifier_values and band.stratifier not in stratifier_values:
        raise _fail(
            CatalogMessages.STRATIFIER_UNKNOWN.format(
                context=context, value=band.stratifier, values=", ".join(stratifier_values)
            )
        )


def _check_age_bands(table: NormativeTable, min_age: Optional[int], max_age: Optional[int]) -> None:
    context = table.context()
    for band in table.bands:
        if band.min_age > band.max_age:
            raise _fail(CatalogMessages.INVERTED_AGE_BAND.format(context=f"{context}[{band.describe()}]"))
        if min_age is not None and max_age is not None:
            if band.min_age < min_age or band.max_age > max_age:
                raise _fail(
                    CatalogMessages.BAND_OUTSIDE_INSTRUMENT.format(
                        context=context,
                        min_age=band.min_age,
                        max_age=band.max_age,
                        inst_min=min_age,
                        inst_max=max_age,
                    )
                )
    for first, second in combinations(table.bands, 2):
        if first.overlaps(second):
            raise _fail(
                CatalogMessages.OVERLAPPING_AGE_BANDS.format(
                    context=context, first=first.describe(), second=second.describe()
                )
            )


def validate_table(
    table: NormativeTable,
    *,
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
    stratifier_values: Iterable[str] = (),
    strict_monotonicity: bool = True,
) -> None:
    """Validate a compiled table against its instrument's declaration.

    Raises:
        TableIntegrityError: on overlapping age bands within a stratifier group,
            bands outside ``[min_age, max_age]``, stratifier mismatches, empty or
            overlapping raw-score ranges, or (when ``strict_monotonicity``)
            values running against ``table.direction``.
    """
    values = tuple(stratifier_values)
    for band in table.bands:
        _check_stratifiers(table, band, values)
    _check_age_bands(table, min_age, max_age)
    for band in table.bands:
        validate_band_ranges(
            table.context(),
            band,
            direction=table.direction,
            strict_monotonicity=strict_monotonicity,
        )

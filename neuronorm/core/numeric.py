"""Numeric helpers shared by derivations and catalog compilation.

Every ratio in the derivation library goes through :func:`safe_div`, and every
rounding of a derived or normative value goes through :func:`safe_round`, so
the same inputs always produce bit-identical outputs.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Any, TypeVar

__all__ = [
    "clamp",
    "safe_round",
    "safe_div",
    "is_real_number",
    "normal_cdf",
]


NumericT = TypeVar("NumericT", int, float, Decimal)


def clamp(value: NumericT, min_value: NumericT, max_value: NumericT) -> NumericT:
    """Clamp a numeric value to be within the specified range.

    Example:
        >>> clamp(150, 1, 99)
        99
        >>> clamp(0.4, 1, 99)
        1
    """
    if min_value > max_value:
        raise ValueError(f"min_value ({min_value}) must be <= max_value ({max_value})")
    return max(min_value, min(value, max_value))


def safe_round(value: float, decimals: int = 2) -> float:
    """Round half-up with Decimal semantics instead of binary float rounding.

    Example:
        >>> safe_round(0.665)
        0.67
        >>> safe_round(2.5, 0)
        3.0
    """
    quantizer = Decimal(10) ** -decimals
    return float(Decimal(str(value)).quantize(quantizer, rounding=ROUND_HALF_UP))


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` when the denominator is zero.

    Example:
        >>> safe_div(9, 12)
        0.75
        >>> safe_div(7, 0)
        0.0
    """
    if denominator == 0:
        return default
    return numerator / denominator


def is_real_number(value: Any) -> bool:
    """True for int/float/Decimal-like reals; booleans are rejected."""

    return isinstance(value, Real) and not isinstance(value, bool)


def normal_cdf(z: float) -> float:
    """Standard normal cumulative distribution function."""

    return 0.5 * (1.0 + math.erf(z / math.sqrt(2.0)))

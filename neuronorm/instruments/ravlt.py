"""Rey Auditory Verbal Learning Test derivations.

Normed variables are the trial counts A1..A7 and B1, the learning total and
the recognition score. The learning-over-trials score and the three indices
are reported without norms.
"""

from __future__ import annotations

from typing import Mapping

from neuronorm.core.numeric import safe_div, safe_round

TRIALS: tuple[str, ...] = ("a1", "a2", "a3", "a4", "a5")
RECOGNITION_OFFSET = 35
INDEX_DECIMALS = 2


def ratio(numerator: float, denominator: float) -> float:
    """Two-decimal ratio where a zero denominator yields 0.

    Example:
        >>> ratio(9, 12)
        0.75
        >>> ratio(4, 0)
        0.0
    """
    return safe_round(safe_div(numerator, denominator, default=0.0), INDEX_DECIMALS)


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Derive RAVLT scores.

    Formulas:
        ESCORE_TOTAL = A1 + A2 + A3 + A4 + A5
        RECONHECIMENTO = rec - 35
        ALT = ESCORE_TOTAL - 5 * A1  (learning over trials)
        VE = A7 / A6  (forgetting rate)
        IP = B1 / A1  (proactive interference)
        IR = A6 / A5  (retroactive interference)
    """
    total = sum(raw[trial] for trial in TRIALS)
    return {
        "A1": raw["a1"],
        "A2": raw["a2"],
        "A3": raw["a3"],
        "A4": raw["a4"],
        "A5": raw["a5"],
        "B1": raw["b1"],
        "A6": raw["a6"],
        "A7": raw["a7"],
        "ESCORE_TOTAL": total,
        "RECONHECIMENTO": raw["rec"] - RECOGNITION_OFFSET,
        "ALT": total - 5 * raw["a1"],
        "VE": ratio(raw["a7"], raw["a6"]),
        "IP": ratio(raw["b1"], raw["a1"]),
        "IR": ratio(raw["a6"], raw["a5"]),
    }

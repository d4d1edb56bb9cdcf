"""Hayling test (adult and child versions).

Part A measures initiation, part B inhibition of the sentence-completing
word. INIBICAO_BA is the extra time part B took; a negative value means the
subject was faster on part B.
"""

from __future__ import annotations

from typing import Mapping

from neuronorm.core.numeric import safe_round

TIME_DECIMALS = 2


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Derive Hayling scores.

    Formulas:
        INIBICAO_BA = tempo_b - tempo_a
    """
    return {
        "TEMPO_A": raw["tempo_a"],
        "TEMPO_B": raw["tempo_b"],
        "ERROS_B": raw["erros_b"],
        "INIBICAO_BA": safe_round(raw["tempo_b"] - raw["tempo_a"], TIME_DECIMALS),
    }

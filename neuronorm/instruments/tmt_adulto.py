"""Adult Trail Making Test derivations.

Both parts are timed in seconds. TEMPO_BA isolates the set-shifting cost of
part B and is kept to two decimals, matching the published anchors.
"""

from __future__ import annotations

from typing import Mapping

from neuronorm.core.numeric import safe_round

TIME_DECIMALS = 2


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    return {
        "TEMPO_A": raw["tempo_a"],
        "TEMPO_B": raw["tempo_b"],
        "TEMPO_BA": safe_round(raw["tempo_b"] - raw["tempo_a"], TIME_DECIMALS),
    }

"""Five Digit Test derivations.

All four parts are timed in seconds; lower is better for every variable,
including the two interference contrasts.
"""

from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    leitura = raw["leitura"]
    return {
        "LEITURA": leitura,
        "CONTAGEM": raw["contagem"],
        "ESCOLHA": raw["escolha"],
        "ALTERNANCIA": raw["alternancia"],
        "INIBICAO": raw["escolha"] - leitura,
        "FLEXIBILIDADE": raw["alternancia"] - leitura,
    }

from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Preschool trails: correct sequences in parts A and B."""
    return {
        "SEQ_A": raw["sequencias_a"],
        "SEQ_B": raw["sequencias_b"],
    }

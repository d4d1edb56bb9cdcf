from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Phonological awareness (oral production): total correct out of 40."""
    return {"ACERTOS": raw["acertos"]}

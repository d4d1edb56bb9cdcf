from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Boston Naming Test (30 items): the score is the number of items named."""
    return {"ACERTOS": raw["acertos"]}

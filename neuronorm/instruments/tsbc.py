"""Corsi block span: forward (OD) and backward (OI) span scores."""

from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    return {
        "OD": raw["ordem_direta"],
        "OI": raw["ordem_inversa"],
    }

"""Fluência Verbal Alternada: category counts pass straight through."""

from __future__ import annotations

from typing import Mapping


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    return {
        "ANIMAIS": raw["animais"],
        "FRUTAS": raw["frutas"],
        "PARES": raw["pares"],
    }

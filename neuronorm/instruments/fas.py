from __future__ import annotations

from typing import Mapping

LETTERS: tuple[str, ...] = ("letra_f", "letra_a", "letra_s")


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """FAS fluency: words per letter, normed on their total."""
    return {
        "LETRA_F": raw["letra_f"],
        "LETRA_A": raw["letra_a"],
        "LETRA_S": raw["letra_s"],
        "TOTAL": sum(raw[letter] for letter in LETTERS),
    }

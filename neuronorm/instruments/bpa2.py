"""BPA-2 (Bateria Psicológica para Avaliação da Atenção) derivations."""

from __future__ import annotations

from typing import Mapping

SUBTASKS: tuple[str, ...] = ("ac", "ad", "aa")


def subtask_score(acertos: float, erros: float, omissoes: float) -> float:
    """Net attention score: hits minus (errors + omissions).

    Example:
        >>> subtask_score(20, 3, 2)
        15
    """
    return acertos - (erros + omissoes)


def derive(raw: Mapping[str, float], age: int) -> dict[str, float]:
    """Compute AC, AD, AA and the general attention score AG = AC + AD + AA.

    Args:
        raw: ``<subtask>_acertos``, ``<subtask>_erros`` and ``<subtask>_omissoes``
            for each of the concentrated (ac), divided (ad) and alternating (aa)
            subtasks.
        age: Subject age in years (unused).
    """
    scores = {
        subtask.upper(): subtask_score(
            raw[f"{subtask}_acertos"],
            raw[f"{subtask}_erros"],
            raw[f"{subtask}_omissoes"],
        )
        for subtask in SUBTASKS
    }
    scores["AG"] = scores["AC"] + scores["AD"] + scores["AA"]
    return scores

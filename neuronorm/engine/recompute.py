"""Sequence-numbered recompute for interactive editing.

Every edit of a subject's raw inputs triggers one full ``score`` call. Calls
may finish out of order, so each one is tagged with a ticket drawn from a
per-(instrument, subject) counter before it starts, and its outcome is
applied only when the ticket is newer than the last outcome applied. Stale
outcomes are discarded and counted. Errors are outcomes too: a newer
``ScoringError`` replaces an older result, and an older error never replaces
a newer result.

Usage:
    >>> controller = RecomputeController(get_engine())
    >>> outcome = controller.recompute("subject-1", "BPA2", 30, raw)
    >>> outcome.applied, outcome.sequence
    (True, 1)
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Mapping, Optional, Tuple

from neuronorm.core.errors import ScoringError
from neuronorm.core.logging import get_logger
from neuronorm.core.metrics import inc_counter
from neuronorm.engine.scoring import ScoringEngine
from neuronorm.engine.types import ScoringResult

__all__ = ["RecomputeTicket", "RecomputeOutcome", "RecomputeController"]

logger = get_logger("neuronorm.engine.recompute", component="recompute")

_Key = Tuple[str, str]


@dataclass(frozen=True, slots=True)
class RecomputeTicket:
    instrument_code: str
    subject_id: str
    sequence: int

    @property
    def key(self) -> _Key:
        return (self.instrument_code, self.subject_id)


@dataclass(frozen=True, slots=True)
class RecomputeOutcome:
    """Result or error of one recompute, tagged with its call sequence.

    ``applied`` is False when a newer outcome had already been applied and
    this one was discarded.
    """

    sequence: int
    result: Optional[ScoringResult] = None
    error: Optional[ScoringError] = None
    applied: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None


class RecomputeController:
    """Last-write-wins by call sequence, never by arrival time.

    The controller holds no scoring state of its own; it only remembers the
    latest applied outcome per (instrument, subject).
    """

    def __init__(self, engine: ScoringEngine) -> None:
        self.engine = engine
        self._lock = Lock()
        self._issued: Dict[_Key, int] = {}
        self._applied: Dict[_Key, RecomputeOutcome] = {}

    def begin(self, instrument_code: str, subject_id: str) -> RecomputeTicket:
        key = (instrument_code, subject_id)
        with self._lock:
            sequence = self._issued.get(key, 0) + 1
            self._issued[key] = sequence
        return RecomputeTicket(instrument_code=instrument_code, subject_id=subject_id, sequence=sequence)

    def submit(
        self,
        ticket: RecomputeTicket,
        result: Optional[ScoringResult] = None,
        error: Optional[ScoringError] = None,
    ) -> RecomputeOutcome:
        """Apply the outcome of ``ticket`` unless a newer one was already applied."""

        if (result is None) == (error is None):
            raise ValueError("Exactly one of result or error must be submitted")
        with self._lock:
            current = self._applied.get(ticket.key)
            if current is not None and current.sequence >= ticket.sequence:
                stale = RecomputeOutcome(sequence=ticket.sequence, result=result, error=error, applied=False)
                inc_counter("recompute.stale_discarded")
                logger.info(
                    "recompute_stale_discarded",
                    extra={
                        "structured_data": {
                            "instrument": ticket.instrument_code,
                            "subject": ticket.subject_id,
                            "sequence": ticket.sequence,
                            "applied_sequence": current.sequence,
                        }
                    },
                )
                return stale
            outcome = RecomputeOutcome(sequence=ticket.sequence, result=result, error=error)
            self._applied[ticket.key] = outcome
        inc_counter("recompute.applied")
        return outcome

    def latest(self, instrument_code: str, subject_id: str) -> Optional[RecomputeOutcome]:
        with self._lock:
            return self._applied.get((instrument_code, subject_id))

    def recompute(
        self,
        subject_id: str,
        instrument_code: str,
        age: Any,
        raw_inputs: Mapping[str, Any],
        stratifier_value: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> RecomputeOutcome:
        """Take a ticket, run a full ``score`` and submit whatever it produced."""

        ticket = self.begin(instrument_code, subject_id)
        try:
            result = self.engine.score(instrument_code, age, raw_inputs, stratifier_value, notes)
        except ScoringError as exc:
            return self.submit(ticket, error=exc)
        return self.submit(ticket, result=result)

    def forget(self, instrument_code: str, subject_id: str) -> None:
        """Drop the applied outcome; issued sequence numbers keep increasing."""

        with self._lock:
            self._applied.pop((instrument_code, subject_id), None)

from __future__ import annotations

from threading import RLock
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from neuronorm.core.logging import get_logger
from neuronorm.core.metrics import count_calls
from neuronorm.core.sentinels import NOT_AVAILABLE, NotAvailableType
from neuronorm.engine.norms.value_objects import NormativeTable, ScoreRange

__all__ = ["NormValue", "TableNotFoundError", "NormativeTableStore"]

NormValue = Union[float, NotAvailableType]

logger = get_logger("neuronorm.engine.norms.store", component="norms")


class TableNotFoundError(KeyError):
    """Raised when no table was registered for an (instrument, variable) pair."""


class NormativeTableStore:
    """Read-only lookup over compiled normative tables.

    Tables are added while the registry is being built; after that the store
    is only read, so concurrent lookups need no coordination. Lookups never
    interpolate, extrapolate or clamp age: anything outside the published
    cells is ``NOT_AVAILABLE``.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._tables: Dict[Tuple[str, str], NormativeTable] = {}

    def add(self, table: NormativeTable) -> None:
        key = (table.instrument_code, table.variable)
        with self._lock:
            if key in self._tables:
                raise ValueError(f"Normative table already registered for {table.context()}")
            self._tables[key] = table

    def table(self, instrument_code: str, variable: str) -> NormativeTable:
        try:
            return self._tables[(instrument_code, variable)]
        except KeyError as exc:
            available = ", ".join(sorted(f"{code}.{var}" for code, var in self._tables)) or "none"
            raise TableNotFoundError(
                f"No normative table for {instrument_code}.{variable}. Registered tables: {available}"
            ) from exc

    def tables(self) -> Mapping[Tuple[str, str], NormativeTable]:
        with self._lock:
            return MappingProxyType(dict(self._tables))

    def __iter__(self) -> Iterator[NormativeTable]:
        return iter(self.tables().values())

    def __len__(self) -> int:
        return len(self._tables)

    @count_calls("norms.lookup.calls")
    def lookup_range(
        self,
        instrument_code: str,
        variable: str,
        age: int,
        raw_score: float,
        stratifier_value: Optional[str] = None,
    ) -> Optional[ScoreRange]:
        """Return the matched cell, or ``None`` when the norms have no entry."""

        table = self.table(instrument_code, variable)
        return table.lookup_range(age, raw_score, stratifier_value)

    def lookup(
        self,
        instrument_code: str,
        variable: str,
        age: int,
        raw_score: float,
        stratifier_value: Optional[str] = None,
    ) -> NormValue:
        """Map a derived raw score to its normative value.

        Returns:
            The percentile or standard score of the single matching cell, or
            ``NOT_AVAILABLE`` when no age band (within the stratifier group)
            contains ``age`` or no range of that band contains ``raw_score``.
        """
        cell = self.lookup_range(instrument_code, variable, age, raw_score, stratifier_value)
        if cell is None:
            logger.debug(
                "norm_not_available",
                extra={
                    "structured_data": {
                        "instrument": instrument_code,
                        "variable": variable,
                        "age": age,
                        "raw_score": raw_score,
                        "stratifier": stratifier_value,
                    }
                },
            )
            return NOT_AVAILABLE
        return cell.value

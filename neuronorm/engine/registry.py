"""Instrument registry.

Holds every :class:`InstrumentDefinition` of a loaded catalog together with
the :class:`NormativeTableStore` built from their tables. The registry is
populated once, while the catalog is being loaded, and is read-only after
that; concurrent scoring calls share it freely.

Usage:
    >>> from neuronorm.engine.registry import get_registry
    >>> registry = get_registry()
    >>> registry.get("BPA2").banding_scheme
    <BandingScheme.PERCENTILE_5: 'PERCENTILE_5'>
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from threading import RLock
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from neuronorm.core.config import get_settings
from neuronorm.core.errors import TableIntegrityError, UnknownInstrumentError
from neuronorm.core.logging import get_logger
from neuronorm.core.metrics import timer
from neuronorm.engine.catalog import load_catalog
from neuronorm.engine.norms.store import NormativeTableStore
from neuronorm.engine.types import InstrumentDefinition
from neuronorm.i18n.pt_messages import CatalogMessages, ScoringErrorMessages

__all__ = [
    "InstrumentRegistry",
    "build_registry",
    "get_registry",
    "reset_registry",
]

logger = get_logger("neuronorm.engine.registry", component="registry")


class InstrumentRegistry:
    """Thread-safe mapping of instrument code to definition.

    Attributes:
        catalog_version: Version string of the catalog the definitions came
            from; echoed in every scoring result.
        store: Normative tables of all registered instruments.
    """

    def __init__(self, catalog_version: Optional[str] = None) -> None:
        self._lock = RLock()
        self._instruments: Dict[str, InstrumentDefinition] = {}
        self.catalog_version = catalog_version
        self.store = NormativeTableStore()

    def register(self, definition: InstrumentDefinition) -> InstrumentDefinition:
        """Register one definition and its tables.

        Raises:
            TableIntegrityError: if the code is already registered.
        """
        with self._lock:
            if definition.code in self._instruments:
                raise TableIntegrityError(
                    CatalogMessages.DUPLICATE_INSTRUMENT.format(code=definition.code),
                    detail={"code": definition.code},
                )
            for variable in definition.scored_variables:
                self.store.add(definition.tables[variable])
            self._instruments[definition.code] = definition
        return definition

    def register_all(self, definitions: Iterable[InstrumentDefinition]) -> None:
        for definition in definitions:
            self.register(definition)

    def get(self, code: str) -> InstrumentDefinition:
        try:
            return self._instruments[code]
        except KeyError as exc:
            available = ", ".join(self.codes()) or "-"
            raise UnknownInstrumentError(
                ScoringErrorMessages.UNKNOWN_INSTRUMENT.format(code=code, available=available),
                field=None,
                value=code,
            ) from exc

    def __contains__(self, code: object) -> bool:
        return code in self._instruments

    def __iter__(self) -> Iterator[InstrumentDefinition]:
        return iter(self.instruments().values())

    def __len__(self) -> int:
        return len(self._instruments)

    def instruments(self) -> Mapping[str, InstrumentDefinition]:
        with self._lock:
            return MappingProxyType(dict(self._instruments))

    def codes(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._instruments)

    def for_age(self, age: int) -> tuple[InstrumentDefinition, ...]:
        """Instruments whose applicability range contains ``age``, in catalog order."""

        return tuple(definition for definition in self if definition.accepts_age(age))


def build_registry(
    directory: Optional[Path] = None,
    *,
    strict_monotonicity: Optional[bool] = None,
) -> InstrumentRegistry:
    """Load a catalog directory and register its instruments.

    ``directory`` and ``strict_monotonicity`` default to the configured
    ``catalog_dir`` (or the packaged catalog) and ``strict_monotonicity``.
    Any integrity violation aborts the build; no partial registry is returned.
    """
    settings = get_settings()
    if directory is None:
        directory = settings.catalog_dir
    if strict_monotonicity is None:
        strict_monotonicity = settings.strict_monotonicity

    with timer("registry.build"):
        catalog = load_catalog(directory, strict_monotonicity=strict_monotonicity)
        registry = InstrumentRegistry(catalog_version=catalog.version)
        registry.register_all(catalog.instruments)

    logger.info(
        "registry_built",
        extra={
            "structured_data": {
                "catalog_version": catalog.version,
                "source": catalog.source,
                "instruments": list(registry.codes()),
                "tables": len(registry.store),
            }
        },
    )
    return registry


@lru_cache(maxsize=1)
def get_registry() -> InstrumentRegistry:
    """Process-wide registry built from the configured catalog on first use."""

    return build_registry()


def reset_registry() -> None:
    """Drop the cached registry so the next call reloads the catalog."""

    get_registry.cache_clear()

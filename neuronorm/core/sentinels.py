from __future__ import annotations

from typing import Any


class NotAvailableType:
    """Marker for a normative value or classification that has no published norm.

    A singleton: compare with ``is``. It is falsy and never equal to a number,
    so it cannot be mistaken for a percentile of 0.
    """

    __slots__ = ()
    _instance: "NotAvailableType | None" = None

    def __new__(cls) -> "NotAvailableType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:  # pragma: no cover - repr logic trivial
        return "NOT_AVAILABLE"

    def __str__(self) -> str:
        return "NOT_AVAILABLE"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "NOT_AVAILABLE"

    def __copy__(self) -> "NotAvailableType":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "NotAvailableType":
        return self


NOT_AVAILABLE = NotAvailableType()


def is_available(value: Any) -> bool:
    return value is not NOT_AVAILABLE


__all__ = ["NOT_AVAILABLE", "NotAvailableType", "is_available"]

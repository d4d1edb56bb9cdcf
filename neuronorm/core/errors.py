"""Domain-specific exception hierarchy for the normalization engine."""

from __future__ import annotations

from typing import Any

from neuronorm.i18n.pt_messages import CatalogMessages, DomainErrorMessages, ScoringErrorMessages

__all__ = [
    "DomainError",
    "NotFoundError",
    "ConfigurationError",
    "ScoringError",
    "UnknownInstrumentError",
    "AgeOutOfRangeError",
    "MissingStratifierError",
    "InvalidInputError",
    "TableIntegrityError",
]


class DomainError(Exception):
    """Base class for recoverable domain-level errors."""

    status_code: int = 400
    error_code: str = "domain_error"
    default_message: str = DomainErrorMessages.DOMAIN_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        final_message = message or self.default_message
        super().__init__(final_message)
        self.message = final_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(DomainError):
    """Base class for missing domain resources."""

    error_code = "not_found"
    status_code = 404
    default_message = DomainErrorMessages.NOT_FOUND


class ConfigurationError(DomainError):
    """Raised when server-side configuration is invalid or incomplete."""

    error_code = "configuration_error"
    status_code = 500
    default_message = DomainErrorMessages.CONFIGURATION_ERROR


class ScoringError(DomainError):
    """Tagged failure returned by ``score``; carries the offending field and value.

    ``error_code`` is the tag consumers switch on. ``field`` is ``None`` when the
    failure concerns the request as a whole (e.g. an unknown instrument code).
    """

    error_code = "scoring_error"
    status_code = 422
    default_message = ScoringErrorMessages.SCORING_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        self.field = field
        self.value = value
        payload: dict[str, Any] = {"field": field, "value": value}
        if isinstance(detail, dict):
            payload.update(detail)
        elif detail is not None:
            payload["extra"] = detail
        super().__init__(message, detail=payload, status_code=status_code)

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "field": self.field,
            "value": self.value,
        }


class UnknownInstrumentError(ScoringError, NotFoundError):
    """Raised when the instrument code is not in the registry."""

    error_code = "unknown_instrument"
    status_code = 404


class AgeOutOfRangeError(ScoringError):
    """Raised when the subject's age is outside the instrument's applicability range."""

    error_code = "age_out_of_range"


class MissingStratifierError(ScoringError):
    """Raised when a stratified instrument is scored without its stratifier."""

    error_code = "missing_stratifier"


class InvalidInputError(ScoringError, ValueError):
    """Raised when a raw input is missing, negative, non-finite or otherwise malformed."""

    error_code = "invalid_input"


class TableIntegrityError(ConfigurationError):
    """Raised while building the registry when normative tables are inconsistent."""

    error_code = "table_integrity_error"
    default_message = CatalogMessages.TABLE_INTEGRITY

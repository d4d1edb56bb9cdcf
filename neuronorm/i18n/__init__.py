"""Localized message catalogs.

Usage:
    >>> from neuronorm.i18n import ScoringErrorMessages
    >>> ScoringErrorMessages.MISSING_FIELD.format(field="acertos")
    'Campo obrigatório ausente: acertos'
"""

from neuronorm.i18n.pt_messages import CatalogMessages, DomainErrorMessages, ScoringErrorMessages

__all__ = [
    "CatalogMessages",
    "DomainErrorMessages",
    "ScoringErrorMessages",
]

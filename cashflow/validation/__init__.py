"""Validation package: turns stored records into canonical definitions."""

from cashflow.validation.normalizer import (
    DefinitionNormalizer,
    NormalizationError,
    normalize_definitions,
)

__all__ = [
    "DefinitionNormalizer",
    "NormalizationError",
    "normalize_definitions",
]

"""Streaming Unicode normalization (NFD, NFC, NFKD, NFKC)."""

from .adapters import (
    AsyncNormalizedScalars,
    NormalizedScalars,
    anormalize_chunks,
    normalize_chunks,
)
from .api import (
    is_canonically_equivalent,
    is_normalized,
    normalize,
    normalize_scalars,
    stable_normalize,
)
from .models import NormalizationForm, QuickCheck, ScalarProperties
from .normalizer import StatefulNormalizer
from .properties import PropertyTable, PropertyTableError, UnicodeDataTable, default_table

__all__ = [
    "AsyncNormalizedScalars",
    "NormalizationForm",
    "NormalizedScalars",
    "PropertyTable",
    "PropertyTableError",
    "QuickCheck",
    "ScalarProperties",
    "StatefulNormalizer",
    "UnicodeDataTable",
    "anormalize_chunks",
    "default_table",
    "is_canonically_equivalent",
    "is_normalized",
    "normalize",
    "normalize_chunks",
    "normalize_scalars",
    "stable_normalize",
]

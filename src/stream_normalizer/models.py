"""Shared data models for the normalization engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class NormalizationForm(str, Enum):
    NFD = "NFD"
    NFC = "NFC"
    NFKD = "NFKD"
    NFKC = "NFKC"

    @property
    def compatibility(self) -> bool:
        """True for the forms that apply compatibility decompositions."""
        return self in (NormalizationForm.NFKD, NormalizationForm.NFKC)

    @property
    def composes(self) -> bool:
        """True for the forms that recompose after decomposition."""
        return self in (NormalizationForm.NFC, NormalizationForm.NFKC)

    @classmethod
    def parse(cls, value: NormalizationForm | str) -> NormalizationForm:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(
            "{!r} is not a known normalization form. Available are {}".format(
                value, [form.value for form in cls]
            )
        )


class QuickCheck(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"


@dataclass(frozen=True)
class ScalarProperties:
    scalar: int
    combining_class: int
    canonical_decomposition: tuple[int, ...]
    compatibility_decomposition: tuple[int, ...]
    composition_excluded: bool
    quick_check: Mapping[NormalizationForm, QuickCheck]
    assigned: bool

    @property
    def is_starter(self) -> bool:
        return self.combining_class == 0

    def quick_check_for(self, form: NormalizationForm | str) -> QuickCheck:
        return self.quick_check[NormalizationForm.parse(form)]


@dataclass
class NormalizerStats:
    scalars_fed: int = 0
    scalars_emitted: int = 0
    fast_path_segments: int = 0
    slow_path_segments: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "scalars_fed": self.scalars_fed,
            "scalars_emitted": self.scalars_emitted,
            "fast_path_segments": self.fast_path_segments,
            "slow_path_segments": self.slow_path_segments,
        }


@dataclass
class StreamSummary:
    form: str
    chunks_read: int = 0
    scalars_in: int = 0
    scalars_out: int = 0
    fast_path_segments: int = 0
    slow_path_segments: int = 0
    elapsed_ms: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "form": self.form,
            "chunks_read": self.chunks_read,
            "scalars_in": self.scalars_in,
            "scalars_out": self.scalars_out,
            "fast_path_segments": self.fast_path_segments,
            "slow_path_segments": self.slow_path_segments,
            "elapsed_ms": self.elapsed_ms,
            **self.extra,
        }

"""Quick-check lookups and the per-sequence fast path."""

from __future__ import annotations

from typing import Iterable

from stream_normalizer.models import NormalizationForm, QuickCheck
from stream_normalizer.properties import PropertyTable, check_scalar, resolve_table


def classify(
    scalar: int,
    form: NormalizationForm | str,
    table: PropertyTable | None = None,
) -> QuickCheck:
    return resolve_table(table).quick_check(check_scalar(scalar), NormalizationForm.parse(form))


def quick_check(
    scalars: Iterable[int],
    form: NormalizationForm | str,
    table: PropertyTable | None = None,
) -> QuickCheck:
    """Quick check of a whole scalar sequence (UAX #15 section 9).

    ``NO`` as soon as a scalar is ``NO`` or combining classes are out of order,
    ``MAYBE`` if any scalar is ``MAYBE``, ``YES`` otherwise.
    """
    resolved = NormalizationForm.parse(form)
    lookup = resolve_table(table)
    result = QuickCheck.YES
    last_class = 0
    for scalar in scalars:
        current = lookup.combining_class(check_scalar(scalar))
        if current and last_class > current:
            return QuickCheck.NO
        check = lookup.quick_check(scalar, resolved)
        if check is QuickCheck.NO:
            return QuickCheck.NO
        if check is QuickCheck.MAYBE:
            result = QuickCheck.MAYBE
        last_class = current
    return result


class FastPathTracker:
    """Tracks whether the pending combining character sequence can pass verbatim.

    A sequence stays fast-pathable while every scalar admitted is ``YES`` and
    combining classes do not decrease. One failure disqualifies the whole
    sequence until :meth:`reset`.
    """

    __slots__ = ("enabled", "fast", "_last_class")

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.fast = enabled
        self._last_class = 0

    def reset(self) -> None:
        self.fast = self.enabled
        self._last_class = 0

    def admit(self, combining_class: int, check: QuickCheck) -> None:
        if self.fast:
            if check is not QuickCheck.YES or (
                combining_class and combining_class < self._last_class
            ):
                self.fast = False
            else:
                self._last_class = combining_class

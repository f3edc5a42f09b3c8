"""Whole-string normalization built on the streaming core."""

from __future__ import annotations

from typing import Iterable

from stream_normalizer.config import DEFAULT_FORM, FAST_PATH
from stream_normalizer.models import NormalizationForm, QuickCheck
from stream_normalizer.normalizer import StatefulNormalizer
from stream_normalizer.properties import PropertyTable, resolve_table
from stream_normalizer.quickcheck import quick_check


def normalize_scalars(
    scalars: Iterable[int],
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
    fast_path: bool = FAST_PATH,
) -> list[int]:
    normalizer = StatefulNormalizer(form, table=table, fast_path=fast_path)
    output = list(normalizer.feed_all(scalars))
    output.extend(normalizer.finish())
    return output


def normalize(
    text: str,
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
    fast_path: bool = FAST_PATH,
) -> str:
    """Return ``text`` in normalization form ``form``."""
    scalars = normalize_scalars(map(ord, text), form, table=table, fast_path=fast_path)
    return "".join(map(chr, scalars))


def is_normalized(
    text: str,
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
) -> bool:
    """Exact check: quick check first, full normalization only on ``MAYBE``."""
    resolved = NormalizationForm.parse(form)
    result = quick_check(map(ord, text), resolved, table)
    if result is QuickCheck.MAYBE:
        return normalize(text, resolved, table=table) == text
    return result is QuickCheck.YES


def stable_normalize(
    text: str,
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
    fast_path: bool = FAST_PATH,
) -> str | None:
    """Normalize ``text`` only if the result is stable across Unicode versions.

    Returns ``None`` when any scalar of the input is unassigned in the table's
    Unicode version; the whole input is needed before that can be decided.
    """
    resolved = NormalizationForm.parse(form)
    lookup = resolve_table(table)
    if not all(lookup.is_assigned(ord(char)) for char in text):
        return None
    return normalize(text, resolved, table=lookup, fast_path=fast_path)


def is_canonically_equivalent(
    first: str, second: str, *, table: PropertyTable | None = None
) -> bool:
    return normalize(first, NormalizationForm.NFD, table=table) == normalize(
        second, NormalizationForm.NFD, table=table
    )

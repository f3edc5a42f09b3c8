"""Full canonical and compatibility decomposition of scalars."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from stream_normalizer.config import DECOMPOSITION_CACHE_SIZE
from stream_normalizer.models import NormalizationForm
from stream_normalizer.properties import PropertyTable, check_scalar, resolve_table


def decompose(
    scalar: int,
    form: NormalizationForm | str = NormalizationForm.NFD,
    table: PropertyTable | None = None,
) -> tuple[int, ...]:
    """Return the full decomposition of ``scalar`` under ``form``.

    NFD and NFC use canonical mappings, NFKD and NFKC compatibility mappings.
    Mappings are expanded recursively, depth first and left to right, until no
    produced scalar has a further mapping. A scalar without a mapping, assigned
    or not, decomposes to itself.
    """
    resolved = NormalizationForm.parse(form)
    return _full_decomposition(resolve_table(table), resolved.compatibility, check_scalar(scalar))


def decompose_all(
    scalars: Iterable[int],
    form: NormalizationForm | str = NormalizationForm.NFD,
    table: PropertyTable | None = None,
    out: list[int] | None = None,
) -> list[int]:
    """Append the full decomposition of every scalar to ``out`` (a new list by default)."""
    resolved = NormalizationForm.parse(form)
    lookup = resolve_table(table)
    expanded = out if out is not None else []
    for scalar in scalars:
        expanded.extend(
            _full_decomposition(lookup, resolved.compatibility, check_scalar(scalar))
        )
    return expanded


def decompose_into(
    scalars: Iterable[int],
    form: NormalizationForm | str,
    table: PropertyTable | None,
    buffer: list[int],
) -> int:
    """Write the decomposition of ``scalars`` over ``buffer`` from index 0.

    ``buffer`` only grows; entries past the returned length are stale. Returns
    the number of scalars written.
    """
    resolved = NormalizationForm.parse(form)
    lookup = resolve_table(table)
    size = len(buffer)
    length = 0
    for scalar in scalars:
        for part in _full_decomposition(lookup, resolved.compatibility, check_scalar(scalar)):
            if length < size:
                buffer[length] = part
            else:
                buffer.append(part)
                size += 1
            length += 1
    return length


@lru_cache(maxsize=DECOMPOSITION_CACHE_SIZE)
def _full_decomposition(
    table: PropertyTable, compatibility: bool, scalar: int
) -> tuple[int, ...]:
    if compatibility:
        mapping = table.compatibility_decomposition(scalar)
    else:
        mapping = table.canonical_decomposition(scalar)
    if not mapping:
        return (scalar,)
    expanded: list[int] = []
    for part in mapping:
        expanded.extend(_full_decomposition(table, compatibility, part))
    return tuple(expanded)

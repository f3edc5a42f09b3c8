"""Canonical ordering of combining marks."""

from __future__ import annotations

from typing import Iterable

from stream_normalizer.properties import PropertyTable, check_scalar, resolve_table


def reorder(
    scalars: list[int], table: PropertyTable | None = None, stop: int | None = None
) -> list[int]:
    """Canonically order ``scalars[:stop]`` in place and return the list.

    Every maximal run of non-starters is sorted by combining class with a
    stable sort, so marks of equal class keep their relative order. This gives
    the same result as swapping adjacent marks while the later class is nonzero
    and strictly lower than the earlier one. Starters never move.
    """
    lookup = resolve_table(table)
    size = len(scalars) if stop is None else stop
    classes = [lookup.combining_class(check_scalar(scalars[index])) for index in range(size)]
    start = 0
    while start < size:
        if classes[start] == 0:
            start += 1
            continue
        end = start + 1
        while end < size and classes[end]:
            end += 1
        if end - start > 1 and not _is_sorted(classes, start, end):
            order = sorted(range(start, end), key=classes.__getitem__)
            scalars[start:end] = [scalars[index] for index in order]
        start = end
    return scalars


def is_canonically_ordered(
    scalars: Iterable[int], table: PropertyTable | None = None
) -> bool:
    lookup = resolve_table(table)
    previous = 0
    for scalar in scalars:
        current = lookup.combining_class(check_scalar(scalar))
        if current and current < previous:
            return False
        previous = current
    return True


def _is_sorted(classes: list[int], start: int, end: int) -> bool:
    return all(classes[index - 1] <= classes[index] for index in range(start + 1, end))

"""Canonical composition for the composed normalization forms."""

from __future__ import annotations

from typing import Sequence

from stream_normalizer.properties import PropertyTable, resolve_table


def compose(sequence: Sequence[int], table: PropertyTable | None = None) -> list[int]:
    """Recompose a decomposed, canonically ordered sequence.

    The first starter becomes the accumulator. Each following scalar is merged
    into it when a primary composite exists for the pair, the composite is not
    excluded, and no earlier uncombined scalar of equal or higher combining class
    sits between them. Scalars that do not combine are kept, in order, after the
    accumulator. A starter that does not combine closes the current combining
    character sequence and becomes the new accumulator; it can only combine when
    nothing is left uncombined before it (Hangul jamo, some Indic vowel signs).

    Marks are never reordered, only merged into the accumulator.
    """
    if len(sequence) < 2:
        return list(sequence)

    lookup = resolve_table(table)
    output: list[int] = []
    uncombined: list[int] = []
    accumulator: int | None = None
    last_uncombined_class: int | None = None

    for scalar in sequence:
        current = lookup.combining_class(scalar)
        if accumulator is not None and not (
            last_uncombined_class is not None and last_uncombined_class >= current
        ):
            composite = lookup.primary_composite(accumulator, scalar)
            if composite is not None and not lookup.is_composition_excluded(composite):
                accumulator = composite
                continue
        if current == 0:
            if accumulator is not None:
                output.append(accumulator)
            output.extend(uncombined)
            uncombined.clear()
            accumulator = scalar
            last_uncombined_class = None
        else:
            uncombined.append(scalar)
            last_uncombined_class = current

    if accumulator is not None:
        output.append(accumulator)
    output.extend(uncombined)
    return output

"""Lazy sequence adapters over :class:`StatefulNormalizer`."""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, Union

from stream_normalizer.config import DEFAULT_FORM, FAST_PATH
from stream_normalizer.models import NormalizationForm
from stream_normalizer.normalizer import StatefulNormalizer
from stream_normalizer.properties import PropertyTable

ScalarLike = Union[int, str]


def as_scalar(item: ScalarLike) -> int:
    if isinstance(item, str):
        if len(item) != 1:
            raise ValueError(f"expected a single character, got {item!r}")
        return ord(item)
    return item


class NormalizedScalars(Iterator[int]):
    """Iterator yielding the normalized scalars of ``source``.

    At most one upstream item is pulled per output scalar, except when a pull
    completes a sequence that normalizes to several scalars; those are drained
    from the normalizer's queue first.
    """

    def __init__(
        self,
        source: Iterable[ScalarLike],
        form: NormalizationForm | str = DEFAULT_FORM,
        *,
        table: PropertyTable | None = None,
        fast_path: bool = FAST_PATH,
    ) -> None:
        self._source = iter(source)
        self.normalizer = StatefulNormalizer(form, table=table, fast_path=fast_path)

    def _next_scalar(self) -> int | None:
        item = next(self._source, None)
        return None if item is None else as_scalar(item)

    def __iter__(self) -> NormalizedScalars:
        return self

    def __next__(self) -> int:
        scalar = self.normalizer.pull(self._next_scalar)
        if scalar is None:
            raise StopIteration
        return scalar


class AsyncNormalizedScalars(AsyncIterator[int]):
    """Async iterator over the normalized scalars of an async ``source``.

    The only suspension point is the upstream ``__anext__``. Abandoning the
    iterator simply drops the normalizer and whatever it had buffered.
    """

    def __init__(
        self,
        source: AsyncIterable[ScalarLike],
        form: NormalizationForm | str = DEFAULT_FORM,
        *,
        table: PropertyTable | None = None,
        fast_path: bool = FAST_PATH,
    ) -> None:
        self._source = source.__aiter__()
        self._exhausted = False
        self.normalizer = StatefulNormalizer(form, table=table, fast_path=fast_path)

    async def _next_scalar(self) -> int | None:
        if self._exhausted:
            return None
        try:
            item = await self._source.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            return None
        return as_scalar(item)

    def __aiter__(self) -> AsyncNormalizedScalars:
        return self

    async def __anext__(self) -> int:
        scalar = await self.normalizer.apull(self._next_scalar)
        if scalar is None:
            raise StopAsyncIteration
        return scalar


def normalize_chunks(
    chunks: Iterable[str],
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
    fast_path: bool = FAST_PATH,
    normalizer: StatefulNormalizer | None = None,
) -> Iterator[str]:
    """Yield one normalized string per input chunk, then the flushed tail.

    Chunks may split combining character sequences anywhere; the concatenated
    output equals normalizing the concatenated input.
    """
    if normalizer is None:
        normalizer = StatefulNormalizer(form, table=table, fast_path=fast_path)
    for chunk in chunks:
        yield "".join(map(chr, normalizer.feed_all(map(ord, chunk))))
    yield "".join(map(chr, normalizer.finish()))


async def anormalize_chunks(
    chunks: AsyncIterable[str],
    form: NormalizationForm | str = DEFAULT_FORM,
    *,
    table: PropertyTable | None = None,
    fast_path: bool = FAST_PATH,
    normalizer: StatefulNormalizer | None = None,
) -> AsyncIterator[str]:
    """Async variant of :func:`normalize_chunks`."""
    if normalizer is None:
        normalizer = StatefulNormalizer(form, table=table, fast_path=fast_path)
    async for chunk in chunks:
        yield "".join(map(chr, normalizer.feed_all(map(ord, chunk))))
    yield "".join(map(chr, normalizer.finish()))

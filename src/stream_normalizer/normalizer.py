"""Incremental, resumable normalization state machine."""

from __future__ import annotations

import logging
from collections import deque
from itertools import islice
from typing import Awaitable, Callable, Iterable, Iterator

from stream_normalizer.composition import compose
from stream_normalizer.config import DEFAULT_FORM, FAST_PATH, RESET_CAPACITY
from stream_normalizer.decomposition import decompose_into
from stream_normalizer.models import NormalizationForm, NormalizerStats, QuickCheck
from stream_normalizer.ordering import reorder
from stream_normalizer.properties import PropertyTable, check_scalar, resolve_table
from stream_normalizer.quickcheck import FastPathTracker

logger = logging.getLogger(__name__)


class StatefulNormalizer:
    """Normalizes a stream of scalars one scalar at a time.

    The normalizer holds at most one pending combining character sequence. A new
    sequence starts at a scalar with combining class 0 whose quick check for the
    form is ``YES``; every other scalar, including starters that may compose
    with what precedes them, joins the pending sequence. Bursts of combining
    marks grow the pending buffer without a cap.

    Output produced when a sequence is finalized goes to a drain queue. ``feed``
    returns the head of that queue; callers drain the rest with ``resume``
    before or while feeding more input.

    At end of input the caller must call ``flush`` until it returns ``None``.
    The normalizer cannot know where the stream ends, so skipping ``flush``
    silently loses the final sequence.

    Instances are not thread-safe; use one normalizer per logical stream.
    """

    def __init__(
        self,
        form: NormalizationForm | str = DEFAULT_FORM,
        *,
        table: PropertyTable | None = None,
        fast_path: bool = FAST_PATH,
    ) -> None:
        self.form = NormalizationForm.parse(form)
        self.fast_path = fast_path
        self._table = resolve_table(table)
        # Buffers only grow; _pending_len is the live prefix of _pending.
        self._pending: list[int] = []
        self._pending_len = 0
        self._scratch: list[int] = []
        self._ready: deque[int] = deque()
        self._tracker = FastPathTracker(fast_path)
        self.stats = NormalizerStats()

    @property
    def state(self) -> str:
        return "accumulating" if self._pending_len else "empty"

    @property
    def capacity(self) -> int:
        """Slots held by the internal buffers since they were last released."""
        return max(len(self._pending), len(self._scratch))

    @property
    def pending(self) -> tuple[int, ...]:
        return tuple(self._pending[: self._pending_len])

    def feed(self, scalar: int) -> int | None:
        check_scalar(scalar)
        self.stats.scalars_fed += 1
        combining_class = self._table.combining_class(scalar)
        check = self._table.quick_check(scalar, self.form)
        if combining_class == 0 and check is QuickCheck.YES and self._pending_len:
            self._finalize()
        if self._pending_len < len(self._pending):
            self._pending[self._pending_len] = scalar
        else:
            self._pending.append(scalar)
        self._pending_len += 1
        self._tracker.admit(combining_class, check)
        return self._next_ready()

    def resume(self) -> int | None:
        """Return the next queued output scalar without consuming input."""
        return self._next_ready()

    def flush(self) -> int | None:
        """Finalize the pending sequence and return the next queued scalar.

        Call repeatedly until it returns ``None``; the normalizer is then empty.
        """
        if self._pending_len:
            self._finalize()
        return self._next_ready()

    def reset(self, max_capacity: int = RESET_CAPACITY) -> None:
        """Discard pending and queued state.

        Buffers keep their storage for reuse when they hold at most
        ``max_capacity`` slots and are replaced by empty ones otherwise.
        """
        if max_capacity < 0:
            raise ValueError("max_capacity must be non-negative")
        capacity = self.capacity
        if capacity > max_capacity:
            logger.debug(
                "buffers_released",
                extra={"event": "buffers_released", "capacity": capacity},
            )
            self._pending = []
            self._scratch = []
        self._pending_len = 0
        self._ready.clear()
        self._tracker.reset()
        self.stats = NormalizerStats()

    def pull(self, next_scalar: Callable[[], int | None]) -> int | None:
        """Produce the next output scalar, pulling input from ``next_scalar``.

        ``next_scalar`` returns ``None`` once the source is exhausted, which
        flushes the normalizer. Returns ``None`` when all output is drained.
        """
        ready = self._next_ready()
        while ready is None:
            scalar = next_scalar()
            if scalar is None:
                return self.flush()
            ready = self.feed(scalar)
        return ready

    async def apull(
        self, next_scalar: Callable[[], Awaitable[int | None]]
    ) -> int | None:
        """Async variant of :meth:`pull`; only ``next_scalar`` ever suspends."""
        ready = self._next_ready()
        while ready is None:
            scalar = await next_scalar()
            if scalar is None:
                return self.flush()
            ready = self.feed(scalar)
        return ready

    def feed_all(self, scalars: Iterable[int]) -> Iterator[int]:
        for scalar in scalars:
            ready = self.feed(scalar)
            while ready is not None:
                yield ready
                ready = self._next_ready()

    def finish(self) -> Iterator[int]:
        ready = self.flush()
        while ready is not None:
            yield ready
            ready = self.flush()

    def copy(self) -> StatefulNormalizer:
        clone = StatefulNormalizer(self.form, table=self._table, fast_path=self.fast_path)
        clone._pending = self._pending[: self._pending_len]
        clone._pending_len = self._pending_len
        clone._ready = deque(self._ready)
        clone._tracker.fast = self._tracker.fast
        clone._tracker._last_class = self._tracker._last_class
        clone.stats = NormalizerStats(**self.stats.to_dict())
        return clone

    __copy__ = copy

    def _finalize(self) -> None:
        live = islice(self._pending, self._pending_len)
        if self._tracker.fast:
            self._ready.extend(live)
            self.stats.fast_path_segments += 1
        else:
            scratch = self._scratch
            length = decompose_into(live, self.form, self._table, scratch)
            reorder(scratch, self._table, stop=length)
            if self.form.composes:
                self._ready.extend(compose(scratch[:length], self._table))
            else:
                self._ready.extend(islice(scratch, length))
            self.stats.slow_path_segments += 1
        self._pending_len = 0
        self._tracker.reset()

    def _next_ready(self) -> int | None:
        if self._ready:
            self.stats.scalars_emitted += 1
            return self._ready.popleft()
        return None

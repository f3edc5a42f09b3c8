from __future__ import annotations

import asyncio
import sys

import pytest

from stream_normalizer.normalizer import StatefulNormalizer


def _drain(normalizer: StatefulNormalizer, first: int | None) -> list[int]:
    output: list[int] = []
    ready = first
    while ready is not None:
        output.append(ready)
        ready = normalizer.resume()
    return output


def _flush_all(normalizer: StatefulNormalizer) -> list[int]:
    return list(normalizer.finish())


def test_combining_mark_is_held_until_flush() -> None:
    normalizer = StatefulNormalizer("NFC")
    assert normalizer.feed(ord("e")) is None
    assert normalizer.feed(0x0301) is None
    assert normalizer.state == "accumulating"
    assert normalizer.flush() == 0x00E9
    assert normalizer.flush() is None
    assert normalizer.state == "empty"


def test_next_starter_releases_previous_sequence() -> None:
    normalizer = StatefulNormalizer("NFC")
    assert normalizer.feed(ord("e")) is None
    assert normalizer.feed(0x0301) is None
    assert normalizer.feed(ord("x")) == 0x00E9
    assert normalizer.pending == (ord("x"),)
    assert _flush_all(normalizer) == [ord("x")]


def test_multi_scalar_results_are_queued() -> None:
    normalizer = StatefulNormalizer("NFKC")
    assert normalizer.feed(0xFB01) is None
    first = normalizer.feed(ord("b"))
    assert _drain(normalizer, first) == [ord("f"), ord("i")]
    assert _flush_all(normalizer) == [ord("b")]


def test_feed_keeps_queue_order_when_not_drained() -> None:
    normalizer = StatefulNormalizer("NFD")
    output = []
    for scalar in (0x00E9, 0x00E8, ord("a")):
        ready = normalizer.feed(scalar)
        if ready is not None:
            output.append(ready)
    output.extend(_flush_all(normalizer))
    assert output == [0x65, 0x301, 0x65, 0x300, ord("a")]


def test_decomposed_forms_reorder_marks_across_feeds() -> None:
    normalizer = StatefulNormalizer("NFD")
    output = list(normalizer.feed_all([ord("a"), 0x0301, 0x0323, ord("b")]))
    output.extend(_flush_all(normalizer))
    assert output == [ord("a"), 0x0323, 0x0301, ord("b")]


def test_hangul_jamo_compose_across_feeds() -> None:
    normalizer = StatefulNormalizer("NFC")
    assert list(normalizer.feed_all([0x1112, 0x1161])) == []
    assert list(normalizer.feed_all([0x11AB])) == []
    assert _flush_all(normalizer) == [0xD55C]


def test_fast_and_slow_segments_are_counted() -> None:
    normalizer = StatefulNormalizer("NFC")
    list(normalizer.feed_all(map(ord, "abe\u0301")))
    list(normalizer.finish())
    assert normalizer.stats.fast_path_segments == 2
    assert normalizer.stats.slow_path_segments == 1
    assert normalizer.stats.scalars_fed == 4
    assert normalizer.stats.scalars_emitted == 3


def test_fast_path_can_be_disabled() -> None:
    normalizer = StatefulNormalizer("NFC", fast_path=False)
    list(normalizer.feed_all(map(ord, "abe\u0301")))
    list(normalizer.finish())
    assert normalizer.stats.fast_path_segments == 0
    assert normalizer.stats.slow_path_segments == 3


def test_unassigned_and_noncharacter_scalars_pass_through() -> None:
    normalizer = StatefulNormalizer("NFKC")
    scalars = [0x0378, 0x0301, 0xFFFF, 0x10FFFF, 0xD800]
    output = list(normalizer.feed_all(scalars))
    output.extend(_flush_all(normalizer))
    assert output == scalars


def test_out_of_range_scalar_is_rejected() -> None:
    normalizer = StatefulNormalizer()
    with pytest.raises(ValueError):
        normalizer.feed(0x110000)
    with pytest.raises(ValueError):
        normalizer.feed(-1)


def test_reset_keeps_small_buffers() -> None:
    normalizer = StatefulNormalizer("NFC")
    list(normalizer.feed_all([ord("a")] + [0x0301] * 50))
    buffer = normalizer._pending
    size = sys.getsizeof(buffer)
    normalizer.reset(max_capacity=64)
    assert normalizer.state == "empty"
    assert normalizer._pending is buffer
    assert sys.getsizeof(normalizer._pending) == size
    assert normalizer.capacity == 51
    assert normalizer.flush() is None


def test_buffers_are_reused_across_sequences() -> None:
    normalizer = StatefulNormalizer("NFD", fast_path=False)
    output = list(normalizer.feed_all([ord("a")] + [0x0301] * 20 + [ord("b")]))
    scratch_size = sys.getsizeof(normalizer._scratch)
    output += normalizer.feed_all([0x00E9, ord("c")])
    output += normalizer.finish()
    assert output == [ord("a")] + [0x0301] * 20 + [ord("b"), 0x65, 0x0301, ord("c")]
    assert sys.getsizeof(normalizer._scratch) == scratch_size
    assert normalizer.capacity == 21


def test_reset_releases_large_buffers() -> None:
    normalizer = StatefulNormalizer("NFC")
    list(normalizer.feed_all([ord("a")] + [0x0301] * 100 + [ord("b")]))
    assert normalizer.capacity >= 101
    buffer = normalizer._pending
    size = sys.getsizeof(buffer)
    normalizer.reset(max_capacity=10)
    assert normalizer._pending is not buffer
    assert sys.getsizeof(normalizer._pending) < size
    assert normalizer.capacity == 0
    assert normalizer.resume() is None


def test_reset_rejects_negative_capacity() -> None:
    with pytest.raises(ValueError):
        StatefulNormalizer().reset(-1)


def test_copy_is_independent() -> None:
    normalizer = StatefulNormalizer("NFC")
    normalizer.feed(ord("e"))
    clone = normalizer.copy()
    clone.feed(0x0301)
    assert _flush_all(clone) == [0x00E9]
    assert _flush_all(normalizer) == [ord("e")]


def test_pull_consumes_only_what_it_needs() -> None:
    source = iter([ord("e"), 0x0301, ord("x"), ord("y")])
    pulled: list[int] = []

    def next_scalar() -> int | None:
        scalar = next(source, None)
        if scalar is not None:
            pulled.append(scalar)
        return scalar

    normalizer = StatefulNormalizer("NFC")
    assert normalizer.pull(next_scalar) == 0x00E9
    assert pulled == [ord("e"), 0x0301, ord("x")]
    assert normalizer.pull(next_scalar) == ord("x")
    assert normalizer.pull(next_scalar) == ord("y")
    assert normalizer.pull(next_scalar) is None


def test_apull_awaits_the_supplier() -> None:
    async def scenario() -> list[int]:
        source = iter([0x1112, 0x1161, 0x11AB, ord("!")])

        async def next_scalar() -> int | None:
            await asyncio.sleep(0)
            return next(source, None)

        normalizer = StatefulNormalizer("NFC")
        output: list[int] = []
        while (scalar := await normalizer.apull(next_scalar)) is not None:
            output.append(scalar)
        return output

    assert asyncio.run(scenario()) == [0xD55C, ord("!")]

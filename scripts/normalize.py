"""Script to normalize a text file (or stdin) in a streaming fashion."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
import time
from typing import Iterator, TextIO

try:
    from stream_normalizer.adapters import normalize_chunks
    from stream_normalizer.api import is_normalized, stable_normalize
    from stream_normalizer.config import CHUNK_SIZE, DEFAULT_FORM, FAST_PATH
    from stream_normalizer.models import NormalizationForm, StreamSummary
    from stream_normalizer.normalizer import StatefulNormalizer
    from stream_normalizer.telemetry import configure_logging, log_event
except ModuleNotFoundError:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))
    from stream_normalizer.adapters import normalize_chunks  # type: ignore[reportMissingImports]
    from stream_normalizer.api import (  # type: ignore[reportMissingImports]
        is_normalized,
        stable_normalize,
    )
    from stream_normalizer.config import (  # type: ignore[reportMissingImports]
        CHUNK_SIZE,
        DEFAULT_FORM,
        FAST_PATH,
    )
    from stream_normalizer.models import (  # type: ignore[reportMissingImports]
        NormalizationForm,
        StreamSummary,
    )
    from stream_normalizer.normalizer import StatefulNormalizer  # type: ignore[reportMissingImports]
    from stream_normalizer.telemetry import (  # type: ignore[reportMissingImports]
        configure_logging,
        log_event,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize Unicode text")
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="File to normalize (default: stdin)",
    )
    parser.add_argument(
        "--form",
        default=DEFAULT_FORM,
        choices=[form.value for form in NormalizationForm],
        type=str.upper,
        help="Normalization form (default from config)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write normalized text to this file (default: stdout)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=CHUNK_SIZE,
        help="Characters read per chunk (default from config)",
    )
    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of input and output",
    )
    parser.add_argument(
        "--no-fast-path",
        action="store_true",
        help="Route every sequence through the full decompose/sort/compose pipeline",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report whether the input is already normalized (exit 1 if not)",
    )
    parser.add_argument(
        "--stable",
        action="store_true",
        help="Refuse (exit 1) when the input contains unassigned code points",
    )
    args = parser.parse_args(argv)
    if args.chunk_size <= 0:
        parser.error("--chunk-size must be positive")
    return args


def read_chunks(handle: TextIO, chunk_size: int) -> Iterator[str]:
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk


def run(args: argparse.Namespace, source: TextIO, sink: TextIO) -> tuple[int, StreamSummary]:
    summary = StreamSummary(form=args.form)
    fast_path = FAST_PATH and not args.no_fast_path
    if args.check or args.stable:
        text = source.read()
        summary.chunks_read = 1
        summary.scalars_in = len(text)
        if args.check:
            normalized = is_normalized(text, args.form)
            summary.extra["normalized"] = normalized
            sink.write(f"{'normalized' if normalized else 'not normalized'}\n")
            return (0 if normalized else 1), summary
        result = stable_normalize(text, args.form, fast_path=fast_path)
        summary.extra["stable"] = result is not None
        if result is None:
            return 1, summary
        summary.scalars_out = len(result)
        sink.write(result)
        return 0, summary

    normalizer = StatefulNormalizer(args.form, fast_path=fast_path)
    for piece in normalize_chunks(
        read_chunks(source, args.chunk_size), normalizer=normalizer
    ):
        summary.chunks_read += 1
        sink.write(piece)
    # normalize_chunks yields one extra piece for the flushed tail.
    summary.chunks_read -= 1
    summary.scalars_in = normalizer.stats.scalars_fed
    summary.scalars_out = normalizer.stats.scalars_emitted
    summary.fast_path_segments = normalizer.stats.fast_path_segments
    summary.slow_path_segments = normalizer.stats.slow_path_segments
    return 0, summary


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger = configure_logging()
    start = time.perf_counter()
    source = (
        args.path.open("r", encoding=args.encoding, newline="")
        if args.path
        else sys.stdin
    )
    sink = (
        args.output.open("w", encoding=args.encoding, newline="")
        if args.output
        else sys.stdout
    )
    try:
        status, summary = run(args, source, sink)
    finally:
        if args.path:
            source.close()
        if args.output:
            sink.close()
    summary.elapsed_ms = (time.perf_counter() - start) * 1000
    log_event(
        logger,
        "normalize",
        path=str(args.path) if args.path else "-",
        output=str(args.output) if args.output else "-",
        chunk_size=args.chunk_size,
        status=status,
        **summary.to_dict(),
    )
    return status


if __name__ == "__main__":
    sys.exit(main())

"""Compare normalization throughput with and without the quick-check fast path."""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

import numpy as np

from stream_normalizer.api import normalize
from stream_normalizer.models import NormalizationForm

# Weighted alphabet: mostly text that is already normalized, with some
# composed letters, loose combining marks, Hangul and compatibility characters.
_ALPHABET = (
    [chr(code) for code in range(0x61, 0x7B)] * 8
    + [" "] * 10
    + list("\u00e9\u00e8\u00fc\u00f1\u1ea5\u0105")
    + list("\u0328\u0323\u0301\u0300\u0308\u0302")
    + list("\ud55c\uad6d\u1112\u1161\u11ab")
    + list("\ufb01\u2460\u00b2\uff21\u2126")
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark the fast path")
    parser.add_argument("--size", type=int, default=200_000, help="Corpus length")
    parser.add_argument("--seed", type=int, default=7, help="Corpus RNG seed")
    parser.add_argument(
        "--report-path",
        type=Path,
        default=Path("eval/reports/fast_path.json"),
        help="Path to write the benchmark report",
    )
    return parser.parse_args()


def build_corpus(size: int, seed: int) -> str:
    rng = np.random.default_rng(seed)
    indexes = rng.integers(0, len(_ALPHABET), size=size)
    return "".join(_ALPHABET[index] for index in indexes)


def _timed(text: str, form: NormalizationForm, fast_path: bool) -> tuple[str, float]:
    start = time.perf_counter()
    result = normalize(text, form, fast_path=fast_path)
    return result, (time.perf_counter() - start) * 1000


def run_benchmark(text: str) -> dict[str, dict[str, float]]:
    results: dict[str, dict[str, float]] = {}
    for form in NormalizationForm:
        fast, fast_ms = _timed(text, form, True)
        full, full_ms = _timed(text, form, False)
        if fast != full:
            raise AssertionError(f"fast path changed {form.value} output")
        results[form.value] = {
            "fast_ms": fast_ms,
            "full_ms": full_ms,
            "speedup": full_ms / fast_ms if fast_ms else 0.0,
        }
    return results


def main() -> None:
    args = parse_args()
    corpus = build_corpus(args.size, args.seed)
    normalize(corpus[:100])  # build the property table outside the timings
    results = run_benchmark(corpus)
    report = {"size": args.size, "seed": args.seed, "forms": results}
    args.report_path.parent.mkdir(parents=True, exist_ok=True)
    args.report_path.write_text(json.dumps(report, indent=2))
    print(f"{'form':<6} {'fast ms':>10} {'full ms':>10} {'speedup':>8}")
    for form, metrics in results.items():
        print(
            f"{form:<6} {metrics['fast_ms']:>10.1f} {metrics['full_ms']:>10.1f}"
            f" {metrics['speedup']:>8.2f}"
        )


if __name__ == "__main__":
    main()

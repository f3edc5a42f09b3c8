"""Run the Unicode NormalizationTest.txt conformance suite."""

from __future__ import annotations

import argparse
import json
import subprocess
import unicodedata
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

from stream_normalizer.adapters import normalize_chunks
from stream_normalizer.api import normalize
from stream_normalizer.models import NormalizationForm

# For each form, the column every column of the case must normalize to.
# Columns are c1..c5, indexed from 0.
_EXPECTATIONS: dict[NormalizationForm, tuple[tuple[int, tuple[int, ...]], ...]] = {
    NormalizationForm.NFC: ((1, (0, 1, 2)), (3, (3, 4))),
    NormalizationForm.NFD: ((2, (0, 1, 2)), (4, (3, 4))),
    NormalizationForm.NFKC: ((3, (0, 1, 2, 3, 4)),),
    NormalizationForm.NFKD: ((4, (0, 1, 2, 3, 4)),),
}
_MAX_SAMPLES = 25


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Unicode normalization conformance")
    parser.add_argument(
        "--test-file",
        type=Path,
        default=Path("eval/NormalizationTest.txt"),
        help="Path to the UCD NormalizationTest.txt matching the runtime Unicode version",
    )
    parser.add_argument(
        "--report-path",
        type=Path,
        default=Path("eval/reports/conformance.json"),
        help="Path to write the conformance report",
    )
    parser.add_argument(
        "--history-dir",
        type=Path,
        default=Path("eval/reports/history"),
        help="Directory for timestamped report history",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random chunk partitions used by the streaming check",
    )
    parser.add_argument(
        "--check-unlisted",
        action="store_true",
        help="Also verify that code points absent from part 1 are invariant (slow)",
    )
    return parser.parse_args()


def _decode_field(field: str) -> str:
    return "".join(chr(int(part, 16)) for part in field.split())


def load_cases(path: Path) -> tuple[list[dict], set[int]]:
    """Parse test lines into cases and collect the code points listed in part 1."""
    cases: list[dict] = []
    part1: set[int] = set()
    part = ""
    for line_no, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("@"):
            part = line
            continue
        fields = [field.strip() for field in line.split(";")][:5]
        if len(fields) != 5:
            continue
        columns = [_decode_field(field) for field in fields]
        if part == "@Part1":
            part1.add(ord(columns[0]))
        cases.append({"line": line_no, "part": part, "columns": columns})
    return cases, part1


def _random_chunks(text: str, rng: np.random.Generator) -> list[str]:
    if len(text) < 2:
        return [text]
    cuts = sorted(set(rng.integers(0, len(text) + 1, size=len(text) // 2 + 1).tolist()))
    chunks: list[str] = []
    start = 0
    for cut in cuts:
        chunks.append(text[start:cut])
        start = cut
    chunks.append(text[start:])
    return chunks


def _format(text: str) -> str:
    return " ".join(f"{ord(char):04X}" for char in text)


def check_case(case: dict, rng: np.random.Generator) -> list[dict]:
    failures: list[dict] = []
    columns = case["columns"]
    for form, expectations in _EXPECTATIONS.items():
        for expected_index, source_indexes in expectations:
            expected = columns[expected_index]
            for source_index in source_indexes:
                source = columns[source_index]
                batch = normalize(source, form)
                streamed = "".join(normalize_chunks(_random_chunks(source, rng), form))
                for mode, actual in (("batch", batch), ("stream", streamed)):
                    if actual == expected:
                        continue
                    failures.append(
                        {
                            "line": case["line"],
                            "form": form.value,
                            "mode": mode,
                            "column": f"c{source_index + 1}",
                            "source": _format(source),
                            "expected": _format(expected),
                            "actual": _format(actual),
                        }
                    )
    return failures


def check_unlisted(part1: set[int]) -> list[dict]:
    failures: list[dict] = []
    for scalar in range(0x110000):
        if scalar in part1 or 0xD800 <= scalar <= 0xDFFF:
            continue
        char = chr(scalar)
        for form in NormalizationForm:
            actual = normalize(char, form)
            if actual != char:
                failures.append(
                    {
                        "line": None,
                        "form": form.value,
                        "mode": "batch",
                        "column": "unlisted",
                        "source": _format(char),
                        "expected": _format(char),
                        "actual": _format(actual),
                    }
                )
    return failures


def _get_git_commit() -> str | None:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    return result.stdout.strip() or None


def _load_previous_report(path: Path) -> dict | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        return None


def build_report(cases: list[dict], failures: list[dict], previous: dict | None) -> dict:
    by_form: dict[str, int] = {form.value: 0 for form in NormalizationForm}
    by_mode: dict[str, int] = {"batch": 0, "stream": 0}
    for failure in failures:
        by_form[failure["form"]] += 1
        by_mode[failure["mode"]] = by_mode.get(failure["mode"], 0) + 1
    report = {
        "unicode_version": unicodedata.unidata_version,
        "cases": len(cases),
        "failures": len(failures),
        "failures_by_form": by_form,
        "failures_by_mode": by_mode,
        "failure_samples": failures[:_MAX_SAMPLES],
        "git_commit": _get_git_commit(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    if previous and isinstance(previous.get("failures"), int):
        report["failures_delta"] = report["failures"] - previous["failures"]
    return report


def main() -> None:
    args = parse_args()
    cases, part1 = load_cases(args.test_file)
    rng = np.random.default_rng(args.seed)
    failures: list[dict] = []
    for case in cases:
        failures.extend(check_case(case, rng))
    if args.check_unlisted:
        failures.extend(check_unlisted(part1))

    previous = _load_previous_report(args.report_path)
    report = build_report(cases, failures, previous)
    args.report_path.parent.mkdir(parents=True, exist_ok=True)
    args.report_path.write_text(json.dumps(report, indent=2))
    args.history_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    (args.history_dir / f"conformance-{stamp}.json").write_text(json.dumps(report, indent=2))
    print(json.dumps({key: report[key] for key in ("cases", "failures")}, indent=2))


if __name__ == "__main__":
    main()

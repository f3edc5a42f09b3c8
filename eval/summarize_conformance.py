"""Human-readable summary for conformance reports."""

from __future__ import annotations

import argparse
import json
from pathlib import Path


def _format_delta(value: int | None) -> str:
    if isinstance(value, int):
        return f"{value:+d}"
    return "n/a"


def render_summary(report: dict) -> str:
    lines: list[str] = []
    lines.append("Conformance summary")
    lines.append(
        "unicode: {version} | cases: {cases} | commit: {commit}".format(
            version=report.get("unicode_version", "n/a"),
            cases=report.get("cases", "n/a"),
            commit=report.get("git_commit", "n/a"),
        )
    )
    lines.append(
        f"failures: {report.get('failures', 'n/a')}"
        f" (delta {_format_delta(report.get('failures_delta'))})"
    )
    lines.append("")
    lines.append(f"{'form':<6} {'failures':>9}")
    by_form = report.get("failures_by_form", {})
    for form in ("NFC", "NFD", "NFKC", "NFKD"):
        count = by_form.get(form, "n/a") if isinstance(by_form, dict) else "n/a"
        lines.append(f"{form:<6} {count:>9}")
    by_mode = report.get("failures_by_mode")
    if isinstance(by_mode, dict):
        lines.append("")
        lines.append(
            "batch: {batch} | stream: {stream}".format(
                batch=by_mode.get("batch", "n/a"), stream=by_mode.get("stream", "n/a")
            )
        )
    samples = report.get("failure_samples") or []
    if samples:
        lines.append("")
        lines.append("first failures:")
        for sample in samples[:5]:
            lines.append(
                "  line {line} {form}/{mode} {column}: [{source}] -> [{actual}],"
                " expected [{expected}]".format(**sample)
            )
    return "\n".join(lines)


def _load_report(path: Path) -> dict:
    return json.loads(path.read_text())


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize conformance report JSON")
    parser.add_argument(
        "--report-path",
        type=Path,
        default=Path("eval/reports/conformance.json"),
        help="Path to conformance report JSON",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    report = _load_report(args.report_path)
    print(render_summary(report))


if __name__ == "__main__":
    main()

from __future__ import annotations

import io
import os
import runpy
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


def _env(tmp_path: Path) -> dict[str, str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO_ROOT / "src")
    env["UNORM_DATA_DIR"] = str(tmp_path / "data")
    env.pop("UNORM_TABLE_CACHE", None)
    return env


def test_normalize_script_streams_file(tmp_path: Path) -> None:
    source = tmp_path / "input.txt"
    output = tmp_path / "output.txt"
    source.write_text("cafe\u0301 \ufb01\n" * 50, encoding="utf-8")
    cmd = [
        sys.executable,
        "scripts/normalize.py",
        str(source),
        "--form",
        "nfkc",
        "--chunk-size",
        "7",
        "--output",
        str(output),
    ]
    result = subprocess.run(
        cmd, cwd=REPO_ROOT, env=_env(tmp_path), capture_output=True, text=True
    )
    assert result.returncode == 0, result.stderr
    assert output.read_text(encoding="utf-8") == "caf\u00e9 fi\n" * 50
    assert '"event": "normalize"' in result.stderr


def test_normalize_script_check_exit_code(tmp_path: Path) -> None:
    source = tmp_path / "input.txt"
    source.write_text("e\u0301", encoding="utf-8")
    cmd = [sys.executable, "scripts/normalize.py", str(source), "--check"]
    env = _env(tmp_path)
    nfc = subprocess.run(cmd, cwd=REPO_ROOT, env=env, capture_output=True, text=True)
    assert nfc.returncode == 1, nfc.stderr
    assert nfc.stdout.strip() == "not normalized"
    nfd = subprocess.run(
        cmd + ["--form", "NFD"], cwd=REPO_ROOT, env=env, capture_output=True, text=True
    )
    assert nfd.returncode == 0, nfd.stderr
    assert nfd.stdout.strip() == "normalized"


def test_run_reports_stream_summary() -> None:
    module = runpy.run_path(str(REPO_ROOT / "scripts/normalize.py"))
    args = module["parse_args"](["--form", "NFC", "--chunk-size", "2"])
    sink = io.StringIO()
    status, summary = module["run"](args, io.StringIO("ae\u0301b"), sink)
    assert status == 0
    assert sink.getvalue() == "a\u00e9b"
    assert summary.chunks_read == 2
    assert summary.scalars_in == 4
    assert summary.scalars_out == 3


def test_run_stable_refuses_unassigned_input() -> None:
    module = runpy.run_path(str(REPO_ROOT / "scripts/normalize.py"))
    args = module["parse_args"](["--stable"])
    sink = io.StringIO()
    status, summary = module["run"](args, io.StringIO("a\u0378"), sink)
    assert status == 1
    assert sink.getvalue() == ""
    assert summary.extra["stable"] is False


def test_build_tables_script_writes_cache(tmp_path: Path) -> None:
    target = tmp_path / "ucd.npz"
    cmd = [sys.executable, "scripts/build_tables.py", "--path", str(target)]
    result = subprocess.run(
        cmd, cwd=REPO_ROOT, env=_env(tmp_path), capture_output=True, text=True
    )
    assert result.returncode == 0, result.stderr
    assert target.exists()
    assert "table written to" in result.stdout

"""Configuration for stream_normalizer (env-overridable)."""

from __future__ import annotations

import os
import unicodedata
from pathlib import Path


def _env_path(key: str, default: Path) -> Path:
    return Path(os.getenv(key, str(default))).expanduser()


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = _env_path("UNORM_DATA_DIR", PROJECT_ROOT / "data")
TABLE_DIR = DATA_DIR / "tables"
UNICODE_VERSION = unicodedata.unidata_version
TABLE_CACHE_PATH = _env_path(
    "UNORM_TABLE_CACHE", TABLE_DIR / f"ucd-{UNICODE_VERSION}.npz"
)
CACHE_TABLES = _env_bool("UNORM_CACHE_TABLES", False)

DEFAULT_FORM = os.getenv("UNORM_DEFAULT_FORM", "NFC").strip().upper() or "NFC"
FAST_PATH = _env_bool("UNORM_FAST_PATH", True)
RESET_CAPACITY = _env_int("UNORM_RESET_CAPACITY", 64)
CHUNK_SIZE = _env_int("UNORM_CHUNK_SIZE", 4096)
LOG_LEVEL = os.getenv("UNORM_LOG_LEVEL", "INFO").strip().upper() or "INFO"
DECOMPOSITION_CACHE_SIZE = _env_int("UNORM_DECOMPOSITION_CACHE", 4096)


def ensure_data_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    TABLE_CACHE_PATH.parent.mkdir(parents=True, exist_ok=True)

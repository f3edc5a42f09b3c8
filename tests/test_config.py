from __future__ import annotations

from pathlib import Path

from stream_normalizer import config


def test_env_int_falls_back_on_invalid_values(monkeypatch) -> None:
    monkeypatch.setenv("UNORM_TEST_INT", "12")
    assert config._env_int("UNORM_TEST_INT", 3) == 12
    monkeypatch.setenv("UNORM_TEST_INT", "twelve")
    assert config._env_int("UNORM_TEST_INT", 3) == 3
    monkeypatch.delenv("UNORM_TEST_INT")
    assert config._env_int("UNORM_TEST_INT", 3) == 3


def test_env_bool(monkeypatch) -> None:
    assert config._env_bool("UNORM_TEST_BOOL", True) is True
    monkeypatch.setenv("UNORM_TEST_BOOL", "off")
    assert config._env_bool("UNORM_TEST_BOOL", True) is False
    monkeypatch.setenv("UNORM_TEST_BOOL", "Yes")
    assert config._env_bool("UNORM_TEST_BOOL", False) is True


def test_env_path_expands_user(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("UNORM_TEST_PATH", "~/tables")
    assert config._env_path("UNORM_TEST_PATH", Path("unused")) == tmp_path / "tables"


def test_table_cache_is_named_after_unicode_version() -> None:
    assert config.UNICODE_VERSION in config.TABLE_CACHE_PATH.name
    assert config.DEFAULT_FORM in {"NFC", "NFD", "NFKC", "NFKD"}

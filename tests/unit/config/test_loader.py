"""TOML ローダーのテスト。

load_toml_config: 有効 TOML, 空ファイル, 構文エラー, 不在, 権限なし
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

import pytest

from nixfoundry.config._loader import load_toml_config

_SKIP_PERMISSION = pytest.mark.skipif(
    os.name == "nt" or os.getuid() == 0,
    reason="POSIX permissions required and not running as root",
)


def _write_toml(path: Path, content: str) -> Path:
    """TOML ファイルを書き込みパスを返す。"""
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadTomlConfigValid:
    """有効な TOML ファイルの読み込み。"""

    def test_returns_parsed_dict(self, tmp_path: Path) -> None:
        path = _write_toml(
            tmp_path / "foundry.toml",
            'log_level = "info"\nbackup_on_write = false\n',
        )
        assert load_toml_config(path) == {
            "log_level": "info",
            "backup_on_write": False,
        }

    def test_allow_lists_table(self, tmp_path: Path) -> None:
        """[allow_lists] テーブル → ネストした辞書。"""
        path = _write_toml(
            tmp_path / "foundry.toml",
            '[allow_lists]\nshells = ["zsh", "nu"]\n',
        )
        assert load_toml_config(path) == {"allow_lists": {"shells": ["zsh", "nu"]}}


class TestLoadTomlConfigEmpty:
    def test_returns_empty_dict(self, tmp_path: Path) -> None:
        """空ファイル → 空辞書。"""
        path = _write_toml(tmp_path / "foundry.toml", "")
        assert load_toml_config(path) == {}


class TestLoadTomlConfigErrors:
    """読み込み失敗はそのまま送出される。"""

    def test_syntax_error(self, tmp_path: Path) -> None:
        path = _write_toml(tmp_path / "foundry.toml", "invalid = = = toml")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml_config(path)

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_toml_config(tmp_path / "nonexistent.toml")

    @_SKIP_PERMISSION
    def test_permission_error(self, tmp_path: Path) -> None:
        path = _write_toml(tmp_path / "foundry.toml", 'log_level = "debug"\n')
        path.chmod(0o000)
        try:
            with pytest.raises(PermissionError):
                load_toml_config(path)
        finally:
            path.chmod(0o644)

"""CLI テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from pathlib import Path

import pytest

from nixfoundry.config._locator import CONFIG_DIR_ENV_VAR

PERSONAL_YAML = """\
version: '1'
shell:
  type: zsh
editor:
  type: nvim
packages:
  required:
  - git
  - curl
environment:
  EDITOR: nvim
  LANG: C
"""

PROJECT_YAML = """\
kind: project
version: '1'
shell:
  type: zsh
editor:
  type: nvim
packages:
  required:
  - curl
  - jq
environment:
  LANG: C
"""

TEAM_YAML = """\
kind: team
version: '1'
shell:
  type: bash
editor:
  type: nvim
"""


@pytest.fixture(autouse=True)
def _isolate_config_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """ユーザーの実設定ディレクトリを参照しないようにする。"""
    monkeypatch.delenv(CONFIG_DIR_ENV_VAR, raising=False)


def write_layer(config_dir: Path, relative: str, content: str) -> Path:
    """設定ルート配下にレイヤーファイルを書き込みパスを返す。"""
    path = config_dir / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """personal / project / team:ops の3レイヤーを持つ設定ルート。"""
    root = tmp_path / "nix-foundry"
    write_layer(root, "config.yaml", PERSONAL_YAML)
    write_layer(root, "project.yaml", PROJECT_YAML)
    write_layer(root, "teams/ops.yaml", TEAM_YAML)
    return root

"""設定ディレクトリとレイヤー位置の解決。

設定ルート配下のレイアウト:
    config.yaml              personal レイヤー
    project.yaml             デフォルトの project レイヤー
    projects/<name>.yaml     名前付き project レイヤー
    teams/<name>.yaml        team レイヤー
    backups/                 スナップショット
    foundry.toml             ツール設定
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, assert_never

from nixfoundry.config._errors import InvalidLayerNameError, UnknownKindError
from nixfoundry.models._base import normalize_enum_value
from nixfoundry.models.layer import LayerKind

CONFIG_DIR_ENV_VAR: Final[str] = "NIX_FOUNDRY_CONFIG_DIR"

LAYER_SUFFIX: Final[str] = ".yaml"
PERSONAL_FILE_NAME: Final[str] = "config.yaml"
PROJECT_FILE_NAME: Final[str] = "project.yaml"
PROJECTS_DIR_NAME: Final[str] = "projects"
TEAMS_DIR_NAME: Final[str] = "teams"
BACKUPS_DIR_NAME: Final[str] = "backups"
SETTINGS_FILE_NAME: Final[str] = "foundry.toml"


def get_default_config_dir() -> Path:
    """設定ルートディレクトリを返す。

    環境変数 NIX_FOUNDRY_CONFIG_DIR が設定されていればそのパス、
    なければ ~/.config/nix-foundry を返す。存在チェックは行わない。

    Raises:
        RuntimeError: ホームディレクトリを特定できない場合。
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "nix-foundry"


def parse_layer_kind(value: LayerKind | str) -> LayerKind:
    """文字列をレイヤー種別に変換する（大文字小文字非依存）。

    Raises:
        UnknownKindError: どの種別にも一致しない場合。
    """
    if isinstance(value, LayerKind):
        return value
    try:
        return LayerKind(normalize_enum_value(value, LayerKind))
    except ValueError:
        known = ", ".join(kind.value for kind in LayerKind)
        raise UnknownKindError(
            f"unknown config type: {value!r} (expected one of: {known})"
        ) from None


def validate_layer_name(name: str) -> str:
    """レイヤー名がファイル名として安全か検査し、そのまま返す。

    Raises:
        InvalidLayerNameError: 空、パス区切りを含む、または "." で始まる場合。
    """
    if not name:
        raise InvalidLayerNameError("layer name must not be empty")
    if "/" in name or "\\" in name or os.sep in name:
        raise InvalidLayerNameError(
            f"invalid layer name {name!r}: must not contain path separators"
        )
    if name.startswith("."):
        raise InvalidLayerNameError(
            f"invalid layer name {name!r}: must not start with '.'"
        )
    return name


def resolve_layer_path(
    config_dir: Path,
    kind: LayerKind | str,
    name: str | None = None,
) -> Path:
    """(種別, 名前) をレイヤーファイルのパスに解決する。

    personal は固定パス、project は名前がなければデフォルトパス、
    team は常に名前付きパスに解決される。

    Args:
        config_dir: 設定ルートディレクトリ。
        kind: レイヤー種別。文字列の場合は大文字小文字非依存で解釈する。
        name: project / team のレイヤー名。

    Returns:
        レイヤーファイルのパス（存在チェックは行わない）。

    Raises:
        UnknownKindError: 未知の種別の場合。
        InvalidLayerNameError: team で名前がない、または名前が不正な場合。
    """
    layer_kind = parse_layer_kind(kind)
    match layer_kind:
        case LayerKind.PERSONAL:
            return config_dir / PERSONAL_FILE_NAME
        case LayerKind.PROJECT:
            if not name:
                return config_dir / PROJECT_FILE_NAME
            return _named_layer_path(config_dir / PROJECTS_DIR_NAME, name)
        case LayerKind.TEAM:
            if not name:
                raise InvalidLayerNameError(
                    "team layers require a name (use team:<name>)"
                )
            return _named_layer_path(config_dir / TEAMS_DIR_NAME, name)
        case _:
            assert_never(layer_kind)


def _named_layer_path(directory: Path, name: str) -> Path:
    return directory / f"{validate_layer_name(name)}{LAYER_SUFFIX}"


def get_backup_dir(config_dir: Path) -> Path:
    """スナップショット格納ディレクトリのパスを返す。"""
    return config_dir / BACKUPS_DIR_NAME


def get_settings_path(config_dir: Path) -> Path:
    """ツール設定ファイル foundry.toml のパスを返す。"""
    return config_dir / SETTINGS_FILE_NAME

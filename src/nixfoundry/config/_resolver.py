"""ツール設定リゾルバー。

優先順位: CLI オプション > <config_dir>/foundry.toml > デフォルト値。
設定ソースは項目単位でマージし、allow_lists セクションはフィールド単位でマージする。
"""

from __future__ import annotations

from pathlib import Path

from nixfoundry.config._loader import load_toml_config
from nixfoundry.config._locator import get_default_config_dir, get_settings_path
from nixfoundry.models.settings import FoundrySettings

_ALLOW_LISTS_KEY: str = "allow_lists"


def _merge_section(
    base: dict[str, object] | None,
    override: dict[str, object],
) -> dict[str, object]:
    """テーブルセクションをフィールド単位でマージする。返却値はシャローコピー。"""
    merged: dict[str, object] = dict(base) if base is not None else {}
    merged.update(override)
    return merged


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。
    allow_lists セクションはフィールド単位でマージする。
    None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。

    Raises:
        TypeError: allow_lists が dict でない場合。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        for key, value in layer.items():
            if key == _ALLOW_LISTS_KEY:
                if not isinstance(value, dict):
                    msg = (
                        f"'{_ALLOW_LISTS_KEY}' must be a table, "
                        f"got {type(value).__name__}"
                    )
                    raise TypeError(msg)
                result[_ALLOW_LISTS_KEY] = _merge_section(
                    result.get(_ALLOW_LISTS_KEY, None),  # type: ignore[arg-type]
                    value,
                )
            else:
                result[key] = value
    return result


def filter_cli_overrides(cli_options: dict[str, object]) -> dict[str, object]:
    """CLI オプション辞書から None 値を除外する。

    None 値は「未指定」を意味し、マージ対象から除外する。
    """
    return {k: v for k, v in cli_options.items() if v is not None}


def resolve_settings(
    config_dir: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> FoundrySettings:
    """設定ソースを解決し FoundrySettings を構築する。

    foundry.toml が存在しない場合は該当レイヤーをスキップする。

    Args:
        config_dir: 設定ルートディレクトリ。None の場合は get_default_config_dir()。
        cli_overrides: CLI オプションの辞書。None 値は未指定扱い。

    Returns:
        解決済みの FoundrySettings インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: foundry.toml の TOML 構文が不正な場合。
        OSError: foundry.toml を読み取れない場合（権限なし、ディレクトリなど）。
        TypeError: allow_lists がテーブルでない場合。
    """
    effective_dir = config_dir if config_dir is not None else get_default_config_dir()

    file_layer: dict[str, object] | None = None
    try:
        file_layer = load_toml_config(get_settings_path(effective_dir))
    except FileNotFoundError:
        pass

    cli_layer: dict[str, object] | None = None
    if cli_overrides is not None:
        cli_layer = filter_cli_overrides(cli_overrides)

    merged = merge_config_layers(file_layer, cli_layer)

    # デフォルト値は FoundrySettings のフィールドデフォルトが適用される
    return FoundrySettings.model_validate(merged)

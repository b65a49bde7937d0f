"""TOML 設定ファイルローダー。

foundry.toml のパースのみを行う（バリデーションは _resolver.py が担当）。
アクセスエラーは例外として送出する。
"""

from __future__ import annotations

import tomllib
from pathlib import Path


def load_toml_config(path: Path) -> dict[str, object]:
    """TOML 設定ファイルを読み込み辞書として返す。

    Args:
        path: TOML ファイルのパス。

    Returns:
        パースされた設定辞書。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        PermissionError: 読み取り権限がない場合。
        FileNotFoundError: ファイルが存在しない場合。
    """
    with path.open("rb") as f:
        return tomllib.load(f)

"""レイヤーファイルのコーデック。

バイト列と辞書を対称に変換する。スキーマ検証は行わず、
Layer モデルへの変換は LayerStore が担当する。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar, Final, Protocol

import yaml

# YAML が改行として扱う文字。プレーン・シングルクォートでは保持されない。
_YAML_LINE_BREAKS: Final[frozenset[str]] = frozenset("\x85\u2028\u2029")


class LayerCodec(Protocol):
    """差し替え可能なレイヤーファイル形式。

    decode_error_types / encode_error_types に列挙した例外は、
    LayerStore がそれぞれ LayerDecodeError / LayerEncodeError に変換する。
    """

    decode_error_types: ClassVar[tuple[type[Exception], ...]]
    encode_error_types: ClassVar[tuple[type[Exception], ...]]

    def loads(self, data: bytes) -> dict[str, object]:
        """バイト列を辞書に変換する。空の入力は空辞書。"""
        ...

    def dumps(self, data: Mapping[str, object]) -> bytes:
        """辞書をバイト列に変換する。"""
        ...


class _LayerLoader(yaml.SafeLoader):
    """数値・日付スカラーを記述どおりの文字列として読むローダー。

    レイヤーに数値型・日付型のフィールドはないため、``version: 1.10`` や
    ``PORT: 8080`` は型変換で表記を失わずに文字列のまま渡す。
    """


def _construct_scalar_text(loader: yaml.SafeLoader, node: yaml.Node) -> str:
    return str(loader.construct_scalar(node))  # type: ignore[arg-type]


for _tag in ("int", "float", "timestamp"):
    _LayerLoader.add_constructor(f"tag:yaml.org,2002:{_tag}", _construct_scalar_text)


class _LayerDumper(yaml.SafeDumper):
    """YAML の改行文字を含む文字列をダブルクォートでエスケープするダンパー。"""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if _YAML_LINE_BREAKS.intersection(value):
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style='"')
    return dumper.represent_str(value)


_LayerDumper.add_representer(str, _represent_str)


class YamlLayerCodec:
    """PyYAML の SafeLoader / SafeDumper による YAML コーデック。

    キーの順序はモデルのフィールド定義順のまま書き出す。
    数値・日付スカラーは記述どおりの文字列として読み込む。
    真偽値はそのまま bool になる。
    """

    decode_error_types: ClassVar[tuple[type[Exception], ...]] = (
        yaml.YAMLError,
        UnicodeDecodeError,
        TypeError,
    )
    encode_error_types: ClassVar[tuple[type[Exception], ...]] = (yaml.YAMLError,)

    def loads(self, data: bytes) -> dict[str, object]:
        """YAML バイト列を辞書に変換する。

        Raises:
            yaml.YAMLError: YAML 構文エラーの場合。
            UnicodeDecodeError: UTF-8 でない場合。
            TypeError: トップレベルがマッピングでない場合。
        """
        loaded = yaml.load(data.decode("utf-8"), Loader=_LayerLoader)
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            msg = f"top-level YAML value must be a mapping, got {type(loaded).__name__}"
            raise TypeError(msg)
        return loaded

    def dumps(self, data: Mapping[str, object]) -> bytes:
        """辞書を YAML バイト列に変換する。

        Raises:
            yaml.YAMLError: 表現できない値を含む場合。
        """
        text = yaml.dump(
            dict(data),
            Dumper=_LayerDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return text.encode("utf-8")

"""レイヤー・設定モデルが共有する pydantic 基底。

FoundryBaseModel は Layer の各セクションと FoundrySettings の親で、
ファイルに書かれた未知のキーを拒否し、読み込んだ値を不変にする。
normalize_enum_value は kind や log_level の表記ゆれ（"Team", "DEBUG"）を
列挙値に揃える。
"""

from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict


class FoundryBaseModel(BaseModel):
    """全ドメインモデルの基底クラス。extra="forbid" で厳格モードを一元管理。"""

    model_config = ConfigDict(extra="forbid", frozen=True)


E = TypeVar("E", bound=StrEnum)


def normalize_enum_value(v: object, enum_cls: type[E]) -> object:
    """StrEnum 入力を正規化する（大文字小文字非依存）。

    str 入力を enum_cls のメンバー値と case-insensitive でマッチし、
    正規の値文字列に変換する。マッチしない str や str 以外の入力は
    そのまま返し、後続の Pydantic バリデーションに委ねる。

    Args:
        v: バリデーション対象の入力値。
        enum_cls: マッチ対象の StrEnum クラス。

    Returns:
        正規化された値文字列、またはマッチしない場合は入力値そのまま。
    """
    if isinstance(v, str):
        for member in enum_cls:
            if v.lower() == member.value.lower():
                return member.value
    return v

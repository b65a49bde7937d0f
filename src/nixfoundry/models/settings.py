"""ツール自身の設定モデル。

シェル・エディタの許可リストは起動時に一度だけ解決され、
LayerValidator に注入される。
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Final

from pydantic import Field, StrictBool, StringConstraints, field_validator

from nixfoundry.models._base import FoundryBaseModel, normalize_enum_value

DEFAULT_SHELLS: Final[tuple[str, ...]] = ("zsh", "bash", "fish")
DEFAULT_EDITORS: Final[tuple[str, ...]] = (
    "nano",
    "vim",
    "nvim",
    "emacs",
    "neovim",
    "vscode",
)

_NonEmptyStr = Annotated[str, StringConstraints(min_length=1, strip_whitespace=True)]


class LogLevel(StrEnum):
    """ログレベル。logging モジュールのレベル名と同値。"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class AllowLists(FoundryBaseModel):
    """シェル・エディタ選択の許可リスト。

    照合は大文字小文字非依存で行われるため、格納時の表記は問わない。
    """

    shells: tuple[_NonEmptyStr, ...] = Field(default=DEFAULT_SHELLS, min_length=1)
    editors: tuple[_NonEmptyStr, ...] = Field(default=DEFAULT_EDITORS, min_length=1)

    def allows_shell(self, value: str) -> bool:
        """value がシェル許可リストに含まれるか（大文字小文字非依存）。"""
        return _contains_casefold(self.shells, value)

    def allows_editor(self, value: str) -> bool:
        """value がエディタ許可リストに含まれるか（大文字小文字非依存）。"""
        return _contains_casefold(self.editors, value)


def _contains_casefold(items: tuple[str, ...], value: str) -> bool:
    folded = value.casefold()
    return any(item.casefold() == folded for item in items)


class FoundrySettings(FoundryBaseModel):
    """全設定項目を統合した不変モデル。

    デフォルト値のみで有効なインスタンスを構築可能。

    Attributes:
        allow_lists: シェル・エディタの許可リスト。
        backup_on_write: CLI の書き込み時にスナップショットを取るか。
        validate_on_write: CLI の書き込み時にレイヤーを検証するか。
        log_level: ログ出力レベル。
    """

    allow_lists: AllowLists = Field(default_factory=AllowLists)
    backup_on_write: StrictBool = True
    validate_on_write: StrictBool = True
    log_level: LogLevel = LogLevel.WARNING

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """log_level 入力を大文字の正規値に正規化する。"""
        return normalize_enum_value(v, LogLevel)

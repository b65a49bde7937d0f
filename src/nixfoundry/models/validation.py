"""検証結果と競合レポートの定義。"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from nixfoundry.models._base import FoundryBaseModel


class ViolationCode(StrEnum):
    """検証違反の種別。"""

    MISSING_FIELD = "missing_field"
    INVALID_ENUM = "invalid_enum"


class Violation(FoundryBaseModel):
    """単一の検証違反。

    Attributes:
        field: 違反したフィールドのドット区切りパス（例: "shell.type"）。
        code: 違反種別。
        message: 人間向けの説明。
    """

    field: str = Field(min_length=1)
    code: ViolationCode
    message: str = Field(min_length=1)


class ValidationResult(FoundryBaseModel):
    """レイヤー検証の結果。violations が空なら有効。

    Attributes:
        violations: 検出順に並んだ違反のタプル。
    """

    violations: tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        """違反が1件もない場合に True。"""
        return not self.violations

    def raise_for_violations(self) -> None:
        """最初の違反に対応する例外を送出する。有効な場合は何もしない。

        Raises:
            MissingFieldError: 最初の違反が MISSING_FIELD の場合。
            InvalidEnumError: 最初の違反が INVALID_ENUM の場合。
        """
        # models → config への循環インポートを避けるため遅延インポート
        from nixfoundry.config._errors import raise_for_result

        raise_for_result(self)


class ConflictReport(FoundryBaseModel):
    """2レイヤー間の競合レポート。conflicts が空なら互換。

    Attributes:
        conflicts: 人間向けの競合説明。シェル、エディタ、環境変数キーの順。
    """

    conflicts: tuple[str, ...] = ()

    @property
    def is_compatible(self) -> bool:
        """競合が1件もない場合に True。"""
        return not self.conflicts

    def format(self) -> str:
        """改行区切りの箇条書き文字列に整形する。空の場合は空文字列。"""
        if not self.conflicts:
            return ""
        return "- " + "\n- ".join(self.conflicts)

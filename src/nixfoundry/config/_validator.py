"""レイヤーバリデーター。

単一レイヤーの必須フィールド・列挙値の検証と、
スコープの異なる2レイヤー間の競合検出を行う。

許可リストとの照合は大文字小文字非依存だが、2レイヤー間の
シェル・エディタ比較は保存済みの正規値に対する厳密比較である。
"""

from __future__ import annotations

from nixfoundry.config._errors import ConflictDetectedError
from nixfoundry.models.layer import Layer
from nixfoundry.models.settings import AllowLists
from nixfoundry.models.validation import (
    ConflictReport,
    ValidationResult,
    Violation,
    ViolationCode,
)


class LayerValidator:
    """許可リストを注入されたレイヤーバリデーター。

    Args:
        allow_lists: シェル・エディタの許可リスト。None の場合はデフォルト。
    """

    def __init__(self, allow_lists: AllowLists | None = None) -> None:
        self._allow_lists = allow_lists if allow_lists is not None else AllowLists()

    @property
    def allow_lists(self) -> AllowLists:
        return self._allow_lists

    def validate(self, layer: Layer, *, collect_all: bool = False) -> ValidationResult:
        """レイヤーの構造的な正しさを検証する。

        検査順は version → shell.type → editor.type。
        デフォルトでは最初の違反で打ち切り、1件のみを報告する。

        Args:
            layer: 検証対象のレイヤー。
            collect_all: True の場合は全違反を検査順に収集する。

        Returns:
            検証結果。
        """
        violations: list[Violation] = []
        for check in (self._check_version, self._check_shell, self._check_editor):
            violation = check(layer)
            if violation is None:
                continue
            violations.append(violation)
            if not collect_all:
                break
        return ValidationResult(violations=tuple(violations))

    def _check_version(self, layer: Layer) -> Violation | None:
        if not layer.version:
            return Violation(
                field="version",
                code=ViolationCode.MISSING_FIELD,
                message="version is required",
            )
        return None

    def _check_shell(self, layer: Layer) -> Violation | None:
        shell_type = layer.shell.type
        if not shell_type:
            return Violation(
                field="shell.type",
                code=ViolationCode.MISSING_FIELD,
                message="shell type is required",
            )
        if not self._allow_lists.allows_shell(shell_type):
            return Violation(
                field="shell.type",
                code=ViolationCode.INVALID_ENUM,
                message=f"invalid shell type: {shell_type}",
            )
        return None

    def _check_editor(self, layer: Layer) -> Violation | None:
        editor_type = layer.editor.type
        if not editor_type:
            return Violation(
                field="editor.type",
                code=ViolationCode.MISSING_FIELD,
                message="editor type is required",
            )
        if not self._allow_lists.allows_editor(editor_type):
            return Violation(
                field="editor.type",
                code=ViolationCode.INVALID_ENUM,
                message=f"invalid editor type: {editor_type}",
            )
        return None

    def find_conflicts(self, layer: Layer, other: Layer) -> ConflictReport:
        """2レイヤー間の競合をフィールド単位で検出する。

        シェル・エディタの type は大文字小文字を区別して比較する。
        環境変数は other 側のキー順に走査し、両方に存在して値が
        異なるキーのみを競合とする。値そのものはレポートに含めない。

        Args:
            layer: 比較元のレイヤー。
            other: 比較先のレイヤー。

        Returns:
            競合レポート。競合がなければ空。
        """
        conflicts: list[str] = []

        if layer.shell.type != other.shell.type:
            conflicts.append(
                f"shell type mismatch: {layer.kind}={layer.shell.type}, "
                f"{other.kind}={other.shell.type}"
            )

        if layer.editor.type != other.editor.type:
            conflicts.append(
                f"editor type mismatch: {layer.kind}={layer.editor.type}, "
                f"{other.kind}={other.editor.type}"
            )

        for key, value in other.environment.items():
            if key in layer.environment and layer.environment[key] != value:
                conflicts.append(f"environment {key} has conflicting values")

        return ConflictReport(conflicts=tuple(conflicts))

    def check_conflicts(self, layer: Layer, other: Layer) -> None:
        """競合があれば ConflictDetectedError を送出する。

        Raises:
            ConflictDetectedError: 競合が1件以上ある場合。
        """
        report = self.find_conflicts(layer, other)
        if not report.is_compatible:
            raise ConflictDetectedError(report)


def validate_layer(layer: Layer, *, collect_all: bool = False) -> ValidationResult:
    """デフォルト許可リストでレイヤーを検証する。"""
    return LayerValidator().validate(layer, collect_all=collect_all)


def find_conflicts(layer: Layer, other: Layer) -> ConflictReport:
    """2レイヤー間の競合を検出する。"""
    return LayerValidator().find_conflicts(layer, other)

"""設定エンジンの例外階層。

全ての例外は FoundryError を基底とし、呼び出し元へそのまま伝播する。
エンジン内部での再試行やロールバックは行わない。
"""

from __future__ import annotations

from typing import assert_never

from nixfoundry.models.validation import ConflictReport, ValidationResult, ViolationCode


class FoundryError(Exception):
    """nixfoundry の全例外の基底クラス。"""


# =============================================================================
# 検証
# =============================================================================


class LayerValidationError(FoundryError, ValueError):
    """レイヤー検証の失敗。検証結果全体を保持する。

    Attributes:
        result: 失敗した検証結果（violations は1件以上）。
    """

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        messages = "; ".join(v.message for v in result.violations)
        super().__init__(f"validation failed: {messages}")


class MissingFieldError(LayerValidationError):
    """必須フィールドが空。"""


class InvalidEnumError(LayerValidationError):
    """列挙フィールドの値が許可リストに含まれない。"""


def raise_for_result(result: ValidationResult) -> None:
    """最初の違反の種別に応じた LayerValidationError を送出する。

    Args:
        result: 検証結果。有効な場合は何もしない。

    Raises:
        MissingFieldError: 最初の違反が MISSING_FIELD の場合。
        InvalidEnumError: 最初の違反が INVALID_ENUM の場合。
    """
    if result.is_valid:
        return
    code = result.violations[0].code
    if code is ViolationCode.MISSING_FIELD:
        raise MissingFieldError(result)
    if code is ViolationCode.INVALID_ENUM:
        raise InvalidEnumError(result)
    assert_never(code)


class ConflictDetectedError(FoundryError):
    """2レイヤー間に競合がある。メッセージは箇条書きの全競合。

    Attributes:
        report: 検出された競合レポート。
    """

    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        super().__init__(report.format())


# =============================================================================
# レイヤー識別
# =============================================================================


class UnknownKindError(FoundryError, ValueError):
    """未知のレイヤー種別。"""


class InvalidLayerNameError(FoundryError, ValueError):
    """レイヤー名が不正、または必要な名前が指定されていない。"""


# =============================================================================
# ストレージ
# =============================================================================


class StorageError(FoundryError):
    """永続化層のエラー基底。"""


class LayerNotFoundError(StorageError, FileNotFoundError):
    """指定位置にレイヤーファイルが存在しない。"""


class LayerDecodeError(StorageError):
    """レイヤーファイルの構文またはスキーマが不正。"""


class LayerEncodeError(StorageError):
    """レイヤーのシリアライズに失敗。"""


class StorageIOError(StorageError, OSError):
    """ファイルシステム操作の失敗。"""


class SnapshotError(StorageIOError):
    """バックアップスナップショットの作成に失敗。"""

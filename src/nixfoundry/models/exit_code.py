"""ExitCode: 終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    1-2 はレイヤーの検査結果、3-4 は CLI 層の実行・入力エラーに対応する。
    """

    SUCCESS = 0
    INVALID = 1
    CONFLICT = 2
    EXECUTION_ERROR = 3
    INPUT_ERROR = 4

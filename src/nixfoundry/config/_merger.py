"""レイヤーマージャー。

base レイヤーと overlay レイヤーを決定的に1つの実効レイヤーへ合成する。
入力は変更せず、常に新しい Layer を返す。検証は行わない。
"""

from __future__ import annotations

from collections.abc import Iterable

from nixfoundry.models.layer import Layer


def merge_lists(*sequences: Iterable[str]) -> tuple[str, ...]:
    """複数のリストを連結し、完全一致で重複を除去する。

    最初に出現した順序を保持する。

    Args:
        sequences: 連結するリスト。先頭から順に走査される。

    Returns:
        重複のないタプル。
    """
    seen: set[str] = set()
    merged: list[str] = []
    for sequence in sequences:
        for item in sequence:
            if item not in seen:
                seen.add(item)
                merged.append(item)
    return tuple(merged)


def merge_environment(
    base: dict[str, str],
    overlay: dict[str, str],
) -> dict[str, str]:
    """環境変数マッピングをマージする。

    overlay のマッピングを起点とし、結果に存在しない base のキーのみを追加する。
    キー衝突時は overlay の値が残る。

    Args:
        base: 下位レイヤーのマッピング。
        overlay: 上位レイヤーのマッピング。

    Returns:
        マージ済みの新しい辞書。
    """
    merged = dict(overlay)
    for key, value in base.items():
        if key not in merged:
            merged[key] = value
    return merged


def merge_layers(base: Layer, overlay: Layer) -> Layer:
    """base と overlay を合成した新しいレイヤーを返す。

    overlay のコピーを起点とし、kind・version・shell・editor・git は overlay が勝つ。
    パッケージとツールのリストは base → overlay の順に連結して重複除去する。
    環境変数は merge_environment() の規則に従う。

    Args:
        base: 下位レイヤー。
        overlay: 上位レイヤー。

    Returns:
        マージ済みのレイヤー。
    """
    packages = overlay.packages.model_copy(
        update={
            "required": merge_lists(base.packages.required, overlay.packages.required),
            "additional": merge_lists(
                base.packages.additional, overlay.packages.additional
            ),
        }
    )
    tools = overlay.tools.model_copy(
        update={
            "go": merge_lists(base.tools.go, overlay.tools.go),
            "node": merge_lists(base.tools.node, overlay.tools.node),
            "python": merge_lists(base.tools.python, overlay.tools.python),
        }
    )
    return overlay.model_copy(
        update={
            "packages": packages,
            "tools": tools,
            "environment": merge_environment(base.environment, overlay.environment),
        }
    )

"""設定ディレクトリ全体のスナップショット。

設定ルートをタイムスタンプ付きの .tar.gz に固める。スナップショットは
追記のみで、既存のものを上書き・削除することはない。復元・一覧・
世代管理は提供しない。
"""

from __future__ import annotations

import logging
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Final

from nixfoundry.config._errors import SnapshotError
from nixfoundry.config._locator import get_backup_dir

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX: Final[str] = "backup-"
SNAPSHOT_SUFFIX: Final[str] = ".tar.gz"
TIMESTAMP_FORMAT: Final[str] = "%Y%m%d-%H%M%S"


def _snapshot_path(backup_dir: Path, timestamp: datetime) -> Path:
    """同一秒内の衝突を数値サフィックスで回避したスナップショットパスを返す。"""
    stamp = timestamp.strftime(TIMESTAMP_FORMAT)
    candidate = backup_dir / f"{SNAPSHOT_PREFIX}{stamp}{SNAPSHOT_SUFFIX}"
    counter = 0
    while candidate.exists():
        counter += 1
        candidate = backup_dir / f"{SNAPSHOT_PREFIX}{stamp}-{counter}{SNAPSHOT_SUFFIX}"
    if counter:
        logger.warning(
            "Snapshot name for %s already taken; using %s", stamp, candidate.name
        )
    return candidate


def _excluded_arcname(root: Path, backup_dir: Path) -> str | None:
    """アーカイブから除外するバックアップディレクトリのメンバー名を返す。

    バックアップディレクトリが root の外にある場合は None。
    """
    try:
        relative = backup_dir.resolve().relative_to(root.resolve())
    except ValueError:
        return None
    return f"./{relative.as_posix()}"


def create_snapshot(
    root: Path,
    backup_dir: Path | None = None,
    *,
    now: datetime | None = None,
) -> Path:
    """root ディレクトリ全体を .tar.gz スナップショットに固める。

    アーカイブのメンバーは root を "." とした相対パスで格納される。
    バックアップディレクトリ自身はアーカイブに含めない。

    Args:
        root: 設定ルートディレクトリ。
        backup_dir: スナップショット格納先。None の場合は root/backups。
        now: タイムスタンプに使う日時。None の場合は現在時刻。

    Returns:
        作成したスナップショットのパス。スナップショット ID として扱う。

    Raises:
        SnapshotError: ディレクトリ作成・アーカイブ書き込みに失敗した場合。
    """
    target_dir = backup_dir if backup_dir is not None else get_backup_dir(root)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SnapshotError(
            f"failed to create backup directory {target_dir}: {exc}"
        ) from exc

    timestamp = now if now is not None else datetime.now()
    snapshot = _snapshot_path(target_dir, timestamp)
    excluded = _excluded_arcname(root, target_dir)

    def _filter(info: tarfile.TarInfo) -> tarfile.TarInfo | None:
        if excluded is not None and (
            info.name == excluded or info.name.startswith(f"{excluded}/")
        ):
            return None
        return info

    created = False
    try:
        with tarfile.open(snapshot, "x:gz") as archive:
            created = True
            archive.add(root, arcname=".", filter=_filter)
    except (OSError, tarfile.TarError) as exc:
        if created:
            snapshot.unlink(missing_ok=True)
        raise SnapshotError(
            f"failed to create backup archive {snapshot}: {exc}"
        ) from exc

    logger.info("Created configuration snapshot %s", snapshot)
    return snapshot

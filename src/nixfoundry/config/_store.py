"""LayerStore -- レイヤーの型付き読み書きと安全な書き込み。

レイヤー識別子 (種別, 名前) を設定ルート配下のパスに解決し、
コーデック経由で Layer を読み書きする。safe_write() は
バックアップ → 検証 → 書き込みの順に合成する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from nixfoundry.config._backup import create_snapshot
from nixfoundry.config._codec import LayerCodec, YamlLayerCodec
from nixfoundry.config._errors import (
    LayerDecodeError,
    LayerEncodeError,
    LayerNotFoundError,
    StorageIOError,
    raise_for_result,
)
from nixfoundry.config._locator import (
    LAYER_SUFFIX,
    PROJECTS_DIR_NAME,
    TEAMS_DIR_NAME,
    get_backup_dir,
    parse_layer_kind,
    resolve_layer_path,
)
from nixfoundry.config._validator import LayerValidator
from nixfoundry.models._base import FoundryBaseModel
from nixfoundry.models.layer import Layer, LayerKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOptions:
    """safe_write() の動作オプション。

    Attributes:
        force: 協調するコンポーネント向けのフラグ（例: 確認プロンプトの省略）。
            LayerStore 自身の動作には影響しない。
        validate: 書き込み前にレイヤーを検証する。
        backup: 書き込み前に設定ルート全体のスナップショットを取る。
    """

    force: bool = False
    validate: bool = False
    backup: bool = False


class LayerRef(FoundryBaseModel):
    """保存済みレイヤーへの参照。

    Attributes:
        kind: レイヤー種別。
        name: project / team のレイヤー名。デフォルト project と personal は None。
        path: レイヤーファイルのパス。
    """

    kind: LayerKind
    name: str | None = None
    path: Path


class LayerStore:
    """設定ルート配下のレイヤーを読み書きするストア。

    Args:
        config_dir: 設定ルートディレクトリ。
        codec: レイヤーファイル形式。None の場合は YAML。
        validator: safe_write() で使うバリデーター。None の場合はデフォルト許可リスト。
    """

    def __init__(
        self,
        config_dir: Path,
        *,
        codec: LayerCodec | None = None,
        validator: LayerValidator | None = None,
    ) -> None:
        self._config_dir = config_dir
        self._codec: LayerCodec = codec if codec is not None else YamlLayerCodec()
        self._validator = validator if validator is not None else LayerValidator()

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def backup_dir(self) -> Path:
        return get_backup_dir(self._config_dir)

    @property
    def validator(self) -> LayerValidator:
        return self._validator

    def resolve(self, kind: LayerKind | str, name: str | None = None) -> Path:
        """(種別, 名前) をレイヤーファイルのパスに解決する。

        Raises:
            UnknownKindError: 未知の種別の場合。
            InvalidLayerNameError: team で名前がない、または名前が不正な場合。
        """
        return resolve_layer_path(self._config_dir, kind, name)

    def _absolute(self, location: Path) -> Path:
        """相対パスを設定ルート基準に解決する。絶対パスはそのまま返す。"""
        return self._config_dir / location

    def exists(self, location: Path) -> bool:
        """location にファイルが存在するか。存在しない場合もエラーにしない。"""
        return self._absolute(location).is_file()

    def read(
        self,
        location: Path,
        *,
        default_kind: LayerKind = LayerKind.PERSONAL,
    ) -> Layer:
        """レイヤーファイルを読み込み Layer を構築する。

        Args:
            location: レイヤーファイルのパス。相対パスは設定ルート基準。
            default_kind: ファイルに kind が書かれていない場合の種別。

        Returns:
            読み込んだレイヤー。空ファイルは空のレイヤーになる。

        Raises:
            LayerNotFoundError: ファイルが存在しない場合。
            LayerDecodeError: 構文エラーまたはスキーマ違反の場合。
            StorageIOError: その他の読み取りエラーの場合。
        """
        path = self._absolute(location)
        logger.debug("Reading layer from %s", path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            raise LayerNotFoundError(f"configuration not found: {path}") from None
        except OSError as exc:
            raise StorageIOError(
                f"failed to read configuration {path}: {exc}"
            ) from exc

        try:
            data = self._codec.loads(raw)
        except self._codec.decode_error_types as exc:
            raise LayerDecodeError(
                f"invalid configuration format in {path}: {exc}"
            ) from exc

        payload = dict(data)
        if payload.get("kind") is None:
            payload["kind"] = default_kind.value
        try:
            return Layer.model_validate(payload)
        except ValidationError as exc:
            raise LayerDecodeError(
                f"invalid configuration in {path}: {exc}"
            ) from exc

    def write(self, location: Path, layer: Layer) -> Path:
        """レイヤーをシリアライズして書き込む。

        中間ディレクトリは必要に応じて作成し、既存の内容は無条件に上書きする。

        Args:
            location: 書き込み先。相対パスは設定ルート基準。
            layer: 書き込むレイヤー。

        Returns:
            書き込んだファイルのパス。

        Raises:
            LayerEncodeError: シリアライズに失敗した場合。
            StorageIOError: ディレクトリ作成・書き込みに失敗した場合。
        """
        path = self._absolute(location)
        try:
            data = self._codec.dumps(layer.model_dump(mode="json"))
        except self._codec.encode_error_types as exc:
            raise LayerEncodeError(
                f"failed to marshal configuration for {path}: {exc}"
            ) from exc

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(
                f"failed to create config directory {path.parent}: {exc}"
            ) from exc

        try:
            path.write_bytes(data)
        except OSError as exc:
            raise StorageIOError(
                f"failed to write configuration {path}: {exc}"
            ) from exc

        logger.info("Wrote %s layer to %s", layer.kind, path)
        return path

    def safe_write(
        self,
        location: Path,
        layer: Layer,
        options: WriteOptions | None = None,
    ) -> Path:
        """バックアップ・検証を経てレイヤーを書き込む。

        1. backup: 設定ルート全体のスナップショットを取る
        2. validate: レイヤーを検証する
        3. write() で書き込む

        1 または 2 の失敗時は書き込みを行わない。検証失敗時も
        作成済みのスナップショットは残る。

        Raises:
            SnapshotError: スナップショット作成に失敗した場合。
            MissingFieldError: 必須フィールドが空の場合。
            InvalidEnumError: 列挙値が許可リストにない場合。
            LayerEncodeError: シリアライズに失敗した場合。
            StorageIOError: 書き込みに失敗した場合。
        """
        opts = options if options is not None else WriteOptions()

        if opts.backup:
            self.create_backup()

        if opts.validate:
            raise_for_result(self._validator.validate(layer))

        return self.write(location, layer)

    def create_backup(self) -> Path:
        """設定ルート全体のスナップショットを作成する。

        Raises:
            SnapshotError: スナップショット作成に失敗した場合。
        """
        return create_snapshot(self._config_dir, self.backup_dir)

    def load(self, kind: LayerKind | str, name: str | None = None) -> Layer:
        """種別と名前でレイヤーを読み込む。

        ファイルに kind が書かれていない場合は指定した種別になる。

        Raises:
            UnknownKindError: 未知の種別の場合。
            InvalidLayerNameError: レイヤー名が不正な場合。
            LayerNotFoundError: ファイルが存在しない場合。
            LayerDecodeError: 構文エラーまたはスキーマ違反の場合。
            StorageIOError: その他の読み取りエラーの場合。
        """
        layer_kind = parse_layer_kind(kind)
        return self.read(self.resolve(layer_kind, name), default_kind=layer_kind)

    def save(
        self,
        layer: Layer,
        name: str | None = None,
        options: WriteOptions | None = None,
    ) -> Path:
        """レイヤー自身の kind と name で解決した位置に safe_write() する。"""
        return self.safe_write(self.resolve(layer.kind, name), layer, options)

    def list_layers(self) -> tuple[LayerRef, ...]:
        """保存済みのレイヤーを列挙する。

        順序は personal、デフォルト project、名前付き project、team。
        名前付きレイヤーは名前順。

        Raises:
            StorageIOError: ディレクトリの走査に失敗した場合。
        """
        refs: list[LayerRef] = []
        for kind in (LayerKind.PERSONAL, LayerKind.PROJECT):
            path = self.resolve(kind)
            if path.is_file():
                refs.append(LayerRef(kind=kind, path=path))
        refs.extend(self._list_named(LayerKind.PROJECT, PROJECTS_DIR_NAME))
        refs.extend(self._list_named(LayerKind.TEAM, TEAMS_DIR_NAME))
        return tuple(refs)

    def _list_named(self, kind: LayerKind, dir_name: str) -> list[LayerRef]:
        directory = self._config_dir / dir_name
        if not directory.is_dir():
            return []
        try:
            paths = sorted(directory.glob(f"*{LAYER_SUFFIX}"))
        except OSError as exc:
            raise StorageIOError(
                f"failed to list layers in {directory}: {exc}"
            ) from exc
        return [
            LayerRef(kind=kind, name=path.stem, path=path)
            for path in paths
            if path.is_file() and not path.name.startswith(".")
        ]

"""レイヤー設定エンジン。"""

from nixfoundry.config._backup import create_snapshot
from nixfoundry.config._codec import LayerCodec, YamlLayerCodec
from nixfoundry.config._errors import (
    ConflictDetectedError,
    FoundryError,
    InvalidEnumError,
    InvalidLayerNameError,
    LayerDecodeError,
    LayerEncodeError,
    LayerNotFoundError,
    LayerValidationError,
    MissingFieldError,
    SnapshotError,
    StorageError,
    StorageIOError,
    UnknownKindError,
)
from nixfoundry.config._locator import (
    get_default_config_dir,
    parse_layer_kind,
    resolve_layer_path,
)
from nixfoundry.config._merger import merge_layers, merge_lists
from nixfoundry.config._resolver import resolve_settings
from nixfoundry.config._store import LayerRef, LayerStore, WriteOptions
from nixfoundry.config._validator import LayerValidator, find_conflicts, validate_layer

__all__ = [
    "ConflictDetectedError",
    "FoundryError",
    "InvalidEnumError",
    "InvalidLayerNameError",
    "LayerCodec",
    "LayerDecodeError",
    "LayerEncodeError",
    "LayerNotFoundError",
    "LayerRef",
    "LayerStore",
    "LayerValidationError",
    "LayerValidator",
    "MissingFieldError",
    "SnapshotError",
    "StorageError",
    "StorageIOError",
    "UnknownKindError",
    "WriteOptions",
    "create_snapshot",
    "find_conflicts",
    "get_default_config_dir",
    "merge_layers",
    "merge_lists",
    "parse_layer_kind",
    "resolve_layer_path",
    "resolve_settings",
    "validate_layer",
]

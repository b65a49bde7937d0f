"""nixfoundry ドメインモデルパッケージ。"""

from nixfoundry.models._base import FoundryBaseModel
from nixfoundry.models.exit_code import ExitCode
from nixfoundry.models.layer import (
    EditorConfig,
    GitConfig,
    GitUser,
    Layer,
    LayerKind,
    PackagesConfig,
    ShellConfig,
    ToolsConfig,
)
from nixfoundry.models.settings import (
    DEFAULT_EDITORS,
    DEFAULT_SHELLS,
    AllowLists,
    FoundrySettings,
    LogLevel,
)
from nixfoundry.models.validation import (
    ConflictReport,
    ValidationResult,
    Violation,
    ViolationCode,
)

__all__ = [
    "AllowLists",
    "ConflictReport",
    "DEFAULT_EDITORS",
    "DEFAULT_SHELLS",
    "EditorConfig",
    "ExitCode",
    "FoundryBaseModel",
    "FoundrySettings",
    "GitConfig",
    "GitUser",
    "Layer",
    "LayerKind",
    "LogLevel",
    "PackagesConfig",
    "ShellConfig",
    "ToolsConfig",
    "ValidationResult",
    "Violation",
    "ViolationCode",
]

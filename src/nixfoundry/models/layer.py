"""設定レイヤーのドメインモデル。

personal / project / team の各レイヤーが共有する型付きスキーマ。
振る舞いは持たず、検証は config._validator、マージは config._merger が担当する。
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, StrictBool, field_validator, model_validator

from nixfoundry.models._base import FoundryBaseModel, normalize_enum_value


class LayerKind(StrEnum):
    """レイヤー種別。閉じた列挙で、追加時は全ての分岐で網羅性が検査される。"""

    PERSONAL = "personal"
    PROJECT = "project"
    TEAM = "team"


class _LayerSection(FoundryBaseModel):
    """レイヤーとその各セクションの基底クラス。

    YAML で値を空のまま書いたキー（`environment:` など）は None として
    読み込まれる。None のキーは未指定として除き、フィールドのデフォルトを使う。
    """

    @model_validator(mode="before")
    @classmethod
    def drop_null_values(cls, data: object) -> object:
        """None 値のキーを除外する。"""
        if not isinstance(data, dict):
            return data  # pydantic 内部処理（model instance 渡し）
        return {key: value for key, value in data.items() if value is not None}


class ShellConfig(_LayerSection):
    """シェル選択。type の許可値は AllowLists で注入される。"""

    type: str = ""


class EditorConfig(_LayerSection):
    """エディタ選択。type の許可値は AllowLists で注入される。"""

    type: str = ""


class GitUser(_LayerSection):
    """バージョン管理のユーザー識別情報。"""

    name: str = ""
    email: str = ""


class GitConfig(_LayerSection):
    """バージョン管理設定ブロック。"""

    enable: StrictBool = False
    user: GitUser = Field(default_factory=GitUser)


class PackagesConfig(_LayerSection):
    """パッケージリスト。

    Attributes:
        required: レイヤーが必須とするパッケージ。
        additional: 任意で追加するパッケージ。
    """

    required: tuple[str, ...] = ()
    additional: tuple[str, ...] = ()


class ToolsConfig(_LayerSection):
    """言語ごとのツールリスト。各リストは独立してマージされる。"""

    go: tuple[str, ...] = ()
    node: tuple[str, ...] = ()
    python: tuple[str, ...] = ()


class Layer(_LayerSection):
    """設定レイヤー。不変の値オブジェクト。

    デフォルト値のみで空のレイヤーを構築できる。空のレイヤーは
    構造的には有効だが、LayerValidator の検証は通らない。

    Attributes:
        kind: レイヤー種別。入力は大文字小文字非依存。
        version: 設定フォーマットのバージョン識別子。
        shell: シェル選択。
        editor: エディタ選択。
        git: バージョン管理設定。
        packages: パッケージリスト。
        tools: 言語ごとのツールリスト。
        environment: 環境変数・設定の文字列マッピング。
    """

    kind: LayerKind = LayerKind.PERSONAL
    version: str = ""
    shell: ShellConfig = Field(default_factory=ShellConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    environment: dict[str, str] = Field(default_factory=dict)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: object) -> object:
        """kind 入力を小文字の正規値に正規化する。"""
        return normalize_enum_value(v, LayerKind)

    @field_validator("version", mode="before")
    @classmethod
    def stringify_version(cls, v: object) -> object:
        """数値で渡されたバージョンを文字列化する。

        YamlLayerCodec は数値を記述どおりの文字列で読むため、`version: 1.10` は
        "1.10" のまま保持される。数値型で直接渡した場合は str() の表記になる。
        """
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def stringify_environment(cls, v: object) -> object:
        """スカラーのキー・値を文字列化する。

        ``DEBUG: true`` は "true"、値のないキーは空文字列になる。
        リストやマッピングの値はそのまま残し、後続のバリデーションで拒否する。
        """
        if not isinstance(v, dict):
            return v
        return {_scalar_to_str(key): _scalar_to_str(value) for key, value in v.items()}


def _scalar_to_str(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value

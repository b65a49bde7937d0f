"""LayerValidator のテスト。

validate: 必須フィールド, 許可リスト照合, 打ち切り/全件収集
find_conflicts: シェル, エディタ, 環境変数, 大文字小文字の厳密比較
check_conflicts: ConflictDetectedError の送出
"""

from __future__ import annotations

import pytest

from nixfoundry.config._errors import ConflictDetectedError
from nixfoundry.config._validator import LayerValidator, find_conflicts, validate_layer
from nixfoundry.models.layer import EditorConfig, Layer, LayerKind, ShellConfig
from nixfoundry.models.settings import DEFAULT_EDITORS, DEFAULT_SHELLS, AllowLists
from nixfoundry.models.validation import ViolationCode


def _make_layer(
    *,
    kind: LayerKind = LayerKind.PERSONAL,
    version: str = "1",
    shell: str = "zsh",
    editor: str = "nvim",
    environment: dict[str, str] | None = None,
) -> Layer:
    """検証を通る最小のレイヤーを生成する。"""
    return Layer(
        kind=kind,
        version=version,
        shell=ShellConfig(type=shell),
        editor=EditorConfig(type=editor),
        environment=environment if environment is not None else {},
    )


def _casings(values: tuple[str, ...]) -> list[str]:
    return [v for value in values for v in (value, value.upper(), value.title())]


# =============================================================================
# validate
# =============================================================================


class TestValidateValid:
    """有効なレイヤー。"""

    def test_minimal_layer_is_valid(self) -> None:
        result = LayerValidator().validate(_make_layer())
        assert result.is_valid
        assert result.violations == ()

    @pytest.mark.parametrize("shell", _casings(DEFAULT_SHELLS))
    def test_every_shell_in_any_casing(self, shell: str) -> None:
        """許可リストのシェルは大文字小文字を問わず有効。"""
        assert LayerValidator().validate(_make_layer(shell=shell)).is_valid

    @pytest.mark.parametrize("editor", _casings(DEFAULT_EDITORS))
    def test_every_editor_in_any_casing(self, editor: str) -> None:
        """許可リストのエディタは大文字小文字を問わず有効。"""
        assert LayerValidator().validate(_make_layer(editor=editor)).is_valid


class TestValidateMissingField:
    """必須フィールドが空の場合は MISSING_FIELD。"""

    @pytest.mark.parametrize(
        ("overrides", "field", "message"),
        [
            ({"version": ""}, "version", "version is required"),
            ({"shell": ""}, "shell.type", "shell type is required"),
            ({"editor": ""}, "editor.type", "editor type is required"),
        ],
    )
    def test_missing(
        self, overrides: dict[str, str], field: str, message: str
    ) -> None:
        result = LayerValidator().validate(_make_layer(**overrides))  # type: ignore[arg-type]
        assert not result.is_valid
        (violation,) = result.violations
        assert violation.field == field
        assert violation.code is ViolationCode.MISSING_FIELD
        assert violation.message == message


class TestValidateInvalidEnum:
    """許可リスト外の値は INVALID_ENUM。"""

    @pytest.mark.parametrize("shell", ["tcsh", "powershell", "z sh"])
    def test_invalid_shell(self, shell: str) -> None:
        (violation,) = LayerValidator().validate(_make_layer(shell=shell)).violations
        assert violation.field == "shell.type"
        assert violation.code is ViolationCode.INVALID_ENUM
        assert violation.message == f"invalid shell type: {shell}"

    @pytest.mark.parametrize("editor", ["helix", "notepad", "code"])
    def test_invalid_editor(self, editor: str) -> None:
        (violation,) = LayerValidator().validate(_make_layer(editor=editor)).violations
        assert violation.field == "editor.type"
        assert violation.code is ViolationCode.INVALID_ENUM


class TestValidatePolicy:
    """最初の違反で打ち切るか、全件収集するか。"""

    def test_short_circuit_by_default(self) -> None:
        """デフォルトは最初の違反のみ（version → shell → editor の順）。"""
        layer = Layer()
        result = LayerValidator().validate(layer)
        assert [v.field for v in result.violations] == ["version"]

    def test_shell_reported_before_editor(self) -> None:
        layer = _make_layer(shell="tcsh", editor="notepad")
        result = LayerValidator().validate(layer)
        assert [v.field for v in result.violations] == ["shell.type"]

    def test_collect_all(self) -> None:
        """collect_all=True で全違反を検査順に収集する。"""
        layer = _make_layer(version="", shell="tcsh", editor="")
        result = LayerValidator().validate(layer, collect_all=True)
        assert [(v.field, v.code) for v in result.violations] == [
            ("version", ViolationCode.MISSING_FIELD),
            ("shell.type", ViolationCode.INVALID_ENUM),
            ("editor.type", ViolationCode.MISSING_FIELD),
        ]


class TestValidateInjectedAllowLists:
    """注入した許可リストで検証される。"""

    def test_custom_shell_accepted(self) -> None:
        validator = LayerValidator(AllowLists(shells=("nu",)))
        assert validator.validate(_make_layer(shell="Nu")).is_valid

    def test_default_shell_rejected_by_custom_list(self) -> None:
        validator = LayerValidator(AllowLists(shells=("nu",)))
        (violation,) = validator.validate(_make_layer(shell="zsh")).violations
        assert violation.code is ViolationCode.INVALID_ENUM

    def test_default_validator_unaffected(self) -> None:
        """別インスタンスの許可リストは共有されない。"""
        LayerValidator(AllowLists(shells=("nu",)))
        assert LayerValidator().allow_lists == AllowLists()

    def test_module_level_function_uses_defaults(self) -> None:
        assert validate_layer(_make_layer(shell="fish")).is_valid


# =============================================================================
# find_conflicts
# =============================================================================


class TestFindConflicts:
    """2レイヤー間の競合検出。"""

    def test_identical_layers_compatible(self) -> None:
        layer = _make_layer(environment={"EDITOR": "nvim"})
        report = LayerValidator().find_conflicts(layer, layer)
        assert report.is_compatible
        assert report.conflicts == ()

    def test_shell_mismatch_only(self) -> None:
        """other のシェルのみ変更 → シェル不一致が1件。"""
        personal = _make_layer()
        project = _make_layer(kind=LayerKind.PROJECT, shell="bash")
        report = LayerValidator().find_conflicts(personal, project)
        assert report.conflicts == (
            "shell type mismatch: personal=zsh, project=bash",
        )

    def test_editor_mismatch(self) -> None:
        report = find_conflicts(
            _make_layer(), _make_layer(kind=LayerKind.TEAM, editor="emacs")
        )
        assert report.conflicts == ("editor type mismatch: personal=nvim, team=emacs",)

    def test_case_sensitive_comparison(self) -> None:
        """比較は大文字小文字を区別する（検証とは異なる）。"""
        report = find_conflicts(_make_layer(shell="zsh"), _make_layer(shell="ZSH"))
        assert len(report.conflicts) == 1
        assert report.conflicts[0].startswith("shell type mismatch")

    def test_environment_value_conflict(self) -> None:
        """共通キーで値が異なる場合のみ競合。値はレポートに含めない。"""
        base = _make_layer(environment={"GOPATH": "/go", "LANG": "C"})
        other = _make_layer(environment={"GOPATH": "/home/go", "EDITOR": "vim"})
        report = find_conflicts(base, other)
        assert report.conflicts == ("environment GOPATH has conflicting values",)
        assert "/home/go" not in report.format()

    def test_one_sided_keys_not_conflicts(self) -> None:
        report = find_conflicts(
            _make_layer(environment={"A": "1"}), _make_layer(environment={"B": "2"})
        )
        assert report.is_compatible

    def test_order_shell_editor_environment(self) -> None:
        """順序はシェル → エディタ → other の環境変数キー順。"""
        base = _make_layer(environment={"A": "1", "B": "1"})
        other = _make_layer(
            shell="bash", editor="vim", environment={"B": "2", "A": "2"}
        )
        report = find_conflicts(base, other)
        assert report.conflicts == (
            "shell type mismatch: personal=zsh, personal=bash",
            "editor type mismatch: personal=nvim, personal=vim",
            "environment B has conflicting values",
            "environment A has conflicting values",
        )


class TestCheckConflicts:
    """check_conflicts の例外送出。"""

    def test_no_conflict_returns_none(self) -> None:
        layer = _make_layer()
        assert LayerValidator().check_conflicts(layer, layer) is None

    def test_conflict_raises_with_bulleted_message(self) -> None:
        base = _make_layer(environment={"A": "1"})
        other = _make_layer(editor="vim", environment={"A": "2"})
        with pytest.raises(ConflictDetectedError) as exc_info:
            LayerValidator().check_conflicts(base, other)
        assert str(exc_info.value) == (
            "- editor type mismatch: personal=nvim, personal=vim\n"
            "- environment A has conflicting values"
        )
        assert len(exc_info.value.report.conflicts) == 2

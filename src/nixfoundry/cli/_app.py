"""CliApp: Typer アプリケーション定義。

レイヤー参照は ``kind[:name]`` 形式（例: ``personal``, ``project:web``, ``team:platform``）。
結果は stdout、エラー・警告は stderr に出力する。
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys
import tomllib
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Annotated, assert_never

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from nixfoundry.config import (
    ConflictDetectedError,
    FoundryError,
    InvalidLayerNameError,
    LayerDecodeError,
    LayerEncodeError,
    LayerNotFoundError,
    LayerStore,
    LayerValidationError,
    LayerValidator,
    StorageIOError,
    UnknownKindError,
    WriteOptions,
    YamlLayerCodec,
    get_default_config_dir,
    merge_layers,
    parse_layer_kind,
    resolve_settings,
)
from nixfoundry.config._locator import CONFIG_DIR_ENV_VAR, SETTINGS_FILE_NAME
from nixfoundry.models.exit_code import ExitCode
from nixfoundry.models.layer import Layer, LayerKind
from nixfoundry.models.settings import FoundrySettings, LogLevel

_REF_SEPARATOR = ":"
_REF_HINT = (
    "Layer references are written kind[:name], e.g. personal, project:web, team:ops."
)


class OutputFormat(StrEnum):
    """show / merge の出力形式。"""

    YAML = "yaml"
    JSON = "json"


@dataclass(frozen=True)
class _CliState:
    """コールバックで構築し、サブコマンドへ ctx.obj で渡す実行状態。"""

    settings: FoundrySettings
    store: LayerStore


app = typer.Typer(
    name="nix-foundry",
    help="Manage layered personal, project and team environment configuration.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("nix-foundry"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


def _configure_logging(level: LogLevel) -> None:
    logging.basicConfig(
        level=level.value,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def foundry_callback(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    config_dir: Annotated[
        Path | None,
        typer.Option(
            "--config-dir",
            envvar=CONFIG_DIR_ENV_VAR,
            help="Configuration root (default: ~/.config/nix-foundry).",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    """Resolve settings and open the layer store for the subcommand."""
    effective_dir = config_dir if config_dir is not None else get_default_config_dir()
    overrides: dict[str, object] = {"log_level": LogLevel.DEBUG if verbose else None}

    try:
        settings = resolve_settings(effective_dir, cli_overrides=overrides)
    except (ValidationError, tomllib.TOMLDecodeError, TypeError) as e:
        print(
            f"Error: Invalid settings: {e}\n"
            f"Check {effective_dir / SETTINGS_FILE_NAME} "
            "for syntax errors or invalid values.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    except OSError as e:
        print(
            f"Error: Cannot read settings file: {e}\n"
            f"Check that {effective_dir / SETTINGS_FILE_NAME} is a readable file.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    _configure_logging(settings.log_level)
    store = LayerStore(effective_dir, validator=LayerValidator(settings.allow_lists))
    ctx.obj = _CliState(settings=settings, store=store)


# --- エラー処理ヘルパー ---


def _exit_code_for(error: FoundryError) -> ExitCode:
    """例外種別に対応する終了コードを返す。"""
    if isinstance(error, LayerValidationError):
        return ExitCode.INVALID
    if isinstance(error, ConflictDetectedError):
        return ExitCode.CONFLICT
    if isinstance(error, (StorageIOError, LayerEncodeError)):
        return ExitCode.EXECUTION_ERROR
    return ExitCode.INPUT_ERROR


def _hint_for(error: FoundryError) -> str:
    """例外種別に対応する解決方法のヒントを返す。"""
    if isinstance(error, (UnknownKindError, InvalidLayerNameError)):
        return _REF_HINT
    if isinstance(error, LayerNotFoundError):
        return (
            "Create the layer file first, "
            "or run 'nix-foundry list' to see existing layers."
        )
    if isinstance(error, LayerDecodeError):
        return "Check the layer file for YAML syntax errors or unknown keys."
    if isinstance(error, LayerValidationError):
        return "Fix the listed fields, or pass --no-validate to skip validation."
    if isinstance(error, StorageIOError):
        return "Check permissions and free disk space for the configuration directory."
    return "Run with --verbose for details."


def _fail(error: FoundryError) -> typer.Exit:
    """エラーを stderr に出力し、送出すべき typer.Exit を返す。"""
    print(f"Error: {error}\n{_hint_for(error)}", file=sys.stderr)
    return typer.Exit(code=_exit_code_for(error))


def _state(ctx: typer.Context) -> _CliState:
    state = ctx.obj
    if not isinstance(state, _CliState):
        msg = "CLI state is not initialized"
        raise RuntimeError(msg)
    return state


def parse_layer_ref(ref: str) -> tuple[LayerKind, str | None]:
    """``kind[:name]`` 形式のレイヤー参照を分解する。

    Raises:
        UnknownKindError: 種別が不明な場合。
    """
    kind_part, _, name_part = ref.partition(_REF_SEPARATOR)
    return parse_layer_kind(kind_part.strip()), name_part.strip() or None


def _load_ref(store: LayerStore, ref: str) -> Layer:
    """レイヤー参照を読み込む。失敗時は typer.Exit を送出する。"""
    try:
        kind, name = parse_layer_ref(ref)
        return store.load(kind, name)
    except FoundryError as e:
        raise _fail(e) from None


def _render(layer: Layer, output_format: OutputFormat) -> str:
    """レイヤーを指定形式の文字列に変換する。"""
    if output_format == OutputFormat.YAML:
        return YamlLayerCodec().dumps(layer.model_dump(mode="json")).decode("utf-8")
    if output_format == OutputFormat.JSON:
        return layer.model_dump_json(indent=2)
    assert_never(output_format)


# --- サブコマンド ---


@app.command()
def show(
    ctx: typer.Context,
    ref: Annotated[str, typer.Argument(help="Layer reference, kind[:name].")],
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: yaml or json.")
    ] = OutputFormat.YAML,
) -> None:
    """Print a stored layer."""
    layer = _load_ref(_state(ctx).store, ref)
    print(_render(layer, output_format).rstrip("\n"))


@app.command()
def validate(
    ctx: typer.Context,
    ref: Annotated[str, typer.Argument(help="Layer reference, kind[:name].")],
    collect_all: Annotated[
        bool,
        typer.Option("--all", help="Report every violation instead of the first."),
    ] = False,
) -> None:
    """Validate a stored layer against the shell and editor allow-lists."""
    state = _state(ctx)
    layer = _load_ref(state.store, ref)
    result = state.store.validator.validate(layer, collect_all=collect_all)
    if result.is_valid:
        print(f"{ref}: valid")
        return
    for violation in result.violations:
        print(f"{ref}: {violation.field}: {violation.message}", file=sys.stderr)
    raise typer.Exit(code=ExitCode.INVALID)


@app.command()
def conflicts(
    ctx: typer.Context,
    ref: Annotated[str, typer.Argument(help="Layer reference, kind[:name].")],
    other: Annotated[str, typer.Argument(help="Layer to compare against.")],
) -> None:
    """Report conflicts between two stored layers."""
    state = _state(ctx)
    layer = _load_ref(state.store, ref)
    other_layer = _load_ref(state.store, other)
    report = state.store.validator.find_conflicts(layer, other_layer)
    if report.is_compatible:
        print("No conflicts.")
        return
    print(report.format())
    raise typer.Exit(code=ExitCode.CONFLICT)


@app.command()
def merge(
    ctx: typer.Context,
    base: Annotated[str, typer.Argument(help="Base layer reference.")],
    overlay: Annotated[str, typer.Argument(help="Overlay layer reference.")],
    into: Annotated[
        str | None,
        typer.Option("--into", help="Write the merged layer to this reference."),
    ] = None,
    backup: Annotated[
        bool | None,
        typer.Option("--backup/--no-backup", help="Snapshot before writing."),
    ] = None,
    validate_layer: Annotated[
        bool | None,
        typer.Option("--validate/--no-validate", help="Validate before writing."),
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Write without confirming conflicts.")
    ] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: yaml or json.")
    ] = OutputFormat.YAML,
) -> None:
    """Merge OVERLAY onto BASE and print or store the result."""
    state = _state(ctx)
    base_layer = _load_ref(state.store, base)
    overlay_layer = _load_ref(state.store, overlay)

    report = state.store.validator.find_conflicts(base_layer, overlay_layer)
    if not report.is_compatible:
        print(f"Warning: conflicts between {base} and {overlay}:", file=sys.stderr)
        print(report.format(), file=sys.stderr)
        if into is not None and not force:
            confirmed = typer.confirm(
                f"Write merged layer to {into} anyway?",
                abort=False,
                err=True,
            )
            if not confirmed:
                raise typer.Exit(code=ExitCode.CONFLICT)

    merged = merge_layers(base_layer, overlay_layer)

    if into is None:
        print(_render(merged, output_format).rstrip("\n"))
        return

    options = WriteOptions(
        force=force,
        validate=(
            validate_layer
            if validate_layer is not None
            else state.settings.validate_on_write
        ),
        backup=backup if backup is not None else state.settings.backup_on_write,
    )
    try:
        kind, name = parse_layer_ref(into)
        target = state.store.resolve(kind, name)
        path = state.store.safe_write(
            target, merged.model_copy(update={"kind": kind}), options
        )
    except FoundryError as e:
        raise _fail(e) from None
    print(f"Merged layer written to {path}", file=sys.stderr)


@app.command()
def backup(ctx: typer.Context) -> None:
    """Snapshot the whole configuration directory."""
    try:
        path = _state(ctx).store.create_backup()
    except FoundryError as e:
        raise _fail(e) from None
    print(path)


@app.command("list")
def list_layers(ctx: typer.Context) -> None:
    """List stored layers."""
    try:
        refs = _state(ctx).store.list_layers()
    except FoundryError as e:
        raise _fail(e) from None

    if not refs:
        print("No layers found.", file=sys.stderr)
        return

    table = Table("KIND", "NAME", "PATH")
    for ref in refs:
        table.add_row(ref.kind.value, ref.name or "-", str(ref.path))
    Console().print(table)

"""
Main CLI entry point for treeconf.

Every command works on the layered configuration given with -f, highest
priority first. Changes are written to the first file.
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import sys as _sys
import threading as _threading
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import yaml as _yaml

import treeconf
import treeconf.core as core
import treeconf.settings as settings_
import treeconf.stores as stores
import treeconf.stores.json_file as json_file
import treeconf.stores.yaml_file as yaml_file
import treeconf.tree as tree

_logger = _logging.getLogger(__name__)

CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


class _State:
    """Options of the command group, shared with the subcommands."""

    def __init__(self, files: tuple[_pathlib.Path, ...], settings: settings_.Settings) -> None:
        self.files = files
        self.settings = settings

    def open(self, *, watch: bool = False) -> core.Config:
        """Open the layered configuration; watching only when asked for."""
        settings = self.settings.model_copy(
            update={"watch_files": watch and self.settings.watch_files}
        )
        storages = [stores.use_file(path, settings) for path in self.files]
        return core.Config(storages, settings=settings)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(treeconf.__version__, "-V", "--version", prog_name="treeconf")
@_click.option(
    "-f",
    "--file",
    "files",
    multiple=True,
    required=True,
    type=_click.Path(dir_okay=False, path_type=_pathlib.Path),
    help="Configuration file (.json, .yaml, .yml). Repeat for more layers, highest priority first.",
)
@_click.option("--verbose", is_flag=True, help="Log debug output to stderr.")
@_click.pass_context
def cli(ctx: _click.Context, files: tuple[_pathlib.Path, ...], verbose: bool) -> None:
    """Read, change and watch layered configuration files."""
    try:
        settings = settings_.Settings()
    except ValueError as e:
        raise _click.ClickException(f"Invalid TREECONF_ environment: {e}") from e

    _logging.basicConfig(
        level=_logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=_sys.stderr,
    )
    ctx.obj = _State(files, settings)


def _fail(e: Exception) -> _typing.NoReturn:
    raise _click.ClickException(str(e)) from e


# Errors a user can cause with a bad path, value or file
_USER_ERRORS = (tree.TreeError, stores.StorageError, core.NoWritableStoreError)


def _format_scalar(value: _typing.Any) -> str:
    """Render a scalar tree value the way it would appear in YAML."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, tree.Number):
        return value.text
    return str(value)


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. NO_COLOR env var (if set, disable color)
    3. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)
    if _os.environ.get("NO_COLOR"):
        return (False, False)
    return (_sys.stdout.isatty(), False)


def _print_yaml(yaml_text: str, *, color: bool = True, force_color: bool = False) -> None:
    """Print YAML text, optionally with syntax highlighting."""
    if not color:
        _click.echo(yaml_text, nl=False)
        return
    console = _rich_console.Console(
        force_terminal=force_color,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
    )
    syntax = _rich_syntax.Syntax(
        yaml_text.rstrip("\n"),
        "yaml",
        theme="monokai",
        background_color="default",
    )
    console.print(syntax)


# =============================================================================
# Commands
# =============================================================================


@cli.command()
@_click.argument("path", default="")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Force color on/off (default: auto-detect TTY, respects NO_COLOR).",
)
@_click.pass_obj
def show(state: _State, path: str, as_json: bool, use_color: bool | None) -> None:
    """Show the merged configuration, or the part at PATH.

    \b
    Examples:
        treeconf -f local.yaml -f defaults.yaml show
        treeconf -f config.json show .server --json
    """
    try:
        with state.open() as config:
            value = config.get(path)
    except _USER_ERRORS as e:
        _fail(e)

    if as_json:
        _click.echo(json_file.dumps(value, state.settings.json_indent))
        return
    if not isinstance(value, (tree.Node, list)):
        _click.echo(_format_scalar(value))
        return
    color_enabled, force_color = _should_use_color(use_color)
    _print_yaml(yaml_file.dump(value), color=color_enabled, force_color=force_color)


@cli.command()
@_click.argument("path")
@_click.pass_obj
def get(state: _State, path: str) -> None:
    """Print the value at PATH.

    Scalars are printed bare, nodes and lists as YAML.
    """
    try:
        with state.open() as config:
            value = config.get(path)
    except _USER_ERRORS as e:
        _fail(e)

    if isinstance(value, (tree.Node, list)):
        _click.echo(yaml_file.dump(value), nl=False)
    else:
        _click.echo(_format_scalar(value))


@cli.command(name="set")
@_click.argument("path")
@_click.argument("value")
@_click.pass_obj
def set_(state: _State, path: str, value: str) -> None:
    """Write VALUE at PATH into the first file.

    VALUE is parsed as YAML: 123 is a number, true a bool, {a: 1} a node
    and [1, 2] a list. Quote to force a string ('"123"').
    """
    try:
        parsed = yaml_file.load(value)
    except _yaml.YAMLError as e:
        raise _click.BadParameter(str(e), param_hint="VALUE") from e

    try:
        with state.open() as config:
            config.set(path, parsed)
    except _USER_ERRORS as e:
        _fail(e)
    _logger.debug("Set %s in %s", path, state.files[0])


@cli.command()
@_click.argument("path")
@_click.pass_obj
def reset(state: _State, path: str) -> None:
    """Remove PATH from the first file.

    Values from the other files at PATH become visible again.
    """
    try:
        with state.open() as config:
            config.reset(path)
    except _USER_ERRORS as e:
        _fail(e)


@cli.command()
@_click.argument("paths", nargs=-1)
@_click.pass_obj
def watch(state: _State, paths: tuple[str, ...]) -> None:
    """Print changes below PATHS until interrupted (Ctrl+C).

    The first block lists the current state as added paths.
    """
    def on_error(e: Exception) -> None:
        _click.echo(_click.style(f"reload failed: {e}", fg="red"), err=True)

    def on_change(
        config: core.Config, modified: list[str], added: list[str], removed: list[str]
    ) -> None:
        for label, color, changed in (
            ("~", "yellow", modified),
            ("+", "green", added),
            ("-", "red", removed),
        ):
            for path in changed:
                _click.echo(_click.style(f"{label} {path or '.'}", fg=color))
        _click.echo("")

    try:
        storages = [stores.use_file(path, state.settings) for path in state.files]
        config = core.Config(storages, settings=state.settings, on_error=on_error)
    except _USER_ERRORS as e:
        _fail(e)

    with config:
        config.register(paths, on_change)
        try:
            idle = _threading.Event()
            while not idle.wait(1.0):
                pass
        except KeyboardInterrupt:
            _click.echo("Stopped.", err=True)


if __name__ == "__main__":
    cli()

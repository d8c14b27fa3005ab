"""CLI adapter for ``greeter`` built on ``rich_click`` and ``lib_cli_exit_tools``.

Purpose
-------
Expose the greeting service as the ``greeter`` command. Flags mirror the
environment variables (``-prefix`` / ``PREFIX`` and so on) and accept both the
single-dash and double-dash spellings.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :class:`FlagBool` – boolean option values (``-verbose``, ``-verbose=false``).
* :class:`GreeterCommand` – command class that loads the environment layer
  before any flag is parsed.
* :func:`cli` – the command: resolve configuration, dump, print version, or
  serve.
* :func:`main` – entry point used by ``console_scripts`` and ``python -m``.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root
(:func:`greeter.core.resolve_config`) and the server entry point
(:func:`greeter.server.serve`); ``lib_cli_exit_tools`` centralises the exit
code strategy and the rendering of fatal errors.
"""

from __future__ import annotations

import sys
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click
from click.core import ParameterSource

from .adapters.env.default import parse_bool
from .build_info import version_string
from .core import load_env_layer, resolve_config
from .domain.config import CONFIG_KEYS
from .domain.errors import BindError, InvalidBoolean
from .server import serve

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_ENV_LAYER_KEY: Final[str] = "greeter.env_layer"

USAGE: Final[str] = "greeter\n\nExample service which greets a client using a configurable prefix."


class FlagBool(click.ParamType):
    """Boolean option value using the same vocabulary as the environment.

    The options are declared with ``flag_value="true"`` so a bare ``-verbose``
    means true while ``-verbose=false`` switches off a value set in the
    environment.
    """

    name = "boolean"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> bool:
        if isinstance(value, bool):
            return value
        flag = f"-{param.name}" if param is not None else "flag"
        try:
            return parse_bool(flag, value)
        except InvalidBoolean as exc:
            self.fail(str(exc), param, ctx)


class GreeterCommand(click.RichCommand):
    """Load the environment layer ahead of flag parsing.

    An unparsable boolean variable raises :class:`~greeter.domain.errors.InvalidBoolean`
    here, so the process aborts with that diagnostic even when the command line
    is malformed as well.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta[_ENV_LAYER_KEY] = load_env_layer()
        return super().parse_args(ctx, args)


@click.command(
    "greeter",
    cls=GreeterCommand,
    help=USAGE,
    context_settings=CLICK_CONTEXT_SETTINGS,
)
@click.option(
    "-verbose",
    "--verbose",
    "verbose",
    type=FlagBool(),
    is_flag=False,
    flag_value="true",
    default=False,
    help="Print verbose logs. [VERBOSE]",
)
@click.option(
    "-prefix",
    "--prefix",
    "prefix",
    default="Hello",
    show_default=True,
    help="Greet the world with the given prefix. [PREFIX]",
)
@click.option(
    "-listen",
    "--listen",
    "listen",
    default="0.0.0.0:8080",
    show_default=True,
    help="Listen address (interface and port). [LISTEN]",
)
@click.option(
    "-version",
    "--version",
    "version",
    type=FlagBool(),
    is_flag=False,
    flag_value="true",
    default=False,
    help="Print the version information and exit without starting. [VERSION]",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, **_options: Any) -> None:
    """Resolve the effective configuration, then print the version or serve.

    Only flags given on the command line join the ``flags`` layer, so the
    defaults declared above never shadow environment variables.
    """

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    config = resolve_config(env_layer=ctx.meta.get(_ENV_LAYER_KEY), flags=_explicit_flags(ctx))

    if config.verbose:
        click.echo(config.dump())
    if config.version:
        click.echo(version_string())
        return

    try:
        serve(config)
    except BindError as exc:
        click.echo(str(exc), err=True)
        raise SystemExit(1) from exc


def _explicit_flags(ctx: click.Context) -> dict[str, object]:
    """Return the configuration options that were given on the command line."""

    return {
        name: ctx.params[name]
        for name in CONFIG_KEYS
        if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE
    }


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="greeter",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))

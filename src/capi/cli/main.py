"""Entry point de la CLI (Typer).

Por qué así:
- El callback raíz procesa las opciones globales una sola vez (logging,
  formato de salida, endpoint/token) y las deja en `context.state`.
- `run()` es el límite de errores: ninguna excepción conocida llega al
  usuario como traceback.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.text import Text

from capi import __version__
from capi.cli import doctor, exit_codes, identity, quotas, target
from capi.cli.context import state
from capi.cli.resources import build_resource_app
from capi.core.domain.output_format import OutputFormat
from capi.core.domain.resource_kinds import RESOURCE_KINDS
from capi.core.errors import CapiError
from capi.core.log import configure_logging

app = typer.Typer(
    no_args_is_help=True,
    help="Cloud Foundry V3 / UAA command line client.",
    pretty_exceptions_enable=False,
)

_err = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"capi {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    output: Optional[OutputFormat] = typer.Option(
        None,
        "--output",
        "-o",
        case_sensitive=False,
        help="Output format (default: table).",
    ),
    api: Optional[str] = typer.Option(None, "--api", help="Cloud Controller API URL."),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token."),
    config: Optional[Path] = typer.Option(
        None, "--config", dir_okay=False, help="Config file (default: ~/.capi/config.yml)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    configure_logging(verbose)
    state.output = output
    state.api = api
    state.token = token
    state.config_path = config


for _kind in RESOURCE_KINDS:
    app.add_typer(build_resource_app(_kind), name=_kind.cli_name)

app.add_typer(identity.users_app, name="users")
app.add_typer(identity.groups_app, name="groups")
app.add_typer(quotas.org_quotas_app, name="org-quotas")
app.add_typer(quotas.space_quotas_app, name="space-quotas")
app.command(name="target")(target.target)
app.add_typer(doctor.app, name="doctor")


def print_error(exc: CapiError) -> None:
    message = Text("Error: ", style="bold red")
    message.append(str(exc))
    _err.print(message)
    if exc.hint:
        hint = Text("Hint: ", style="yellow")
        hint.append(exc.hint)
        _err.print(hint)


def run() -> None:
    """Top-level error boundary invoked by the console-script entry point."""

    try:
        code = app(standalone_mode=False)
    except CapiError as exc:
        print_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except (KeyboardInterrupt, click.exceptions.Abort):
        _err.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except Exception as exc:  # noqa: BLE001
        _err.print(
            Text(f"Unexpected error. Please report this issue.\n  {type(exc).__name__}: {exc}", style="red")
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)

    sys.exit(code if isinstance(code, int) else exit_codes.SUCCESS)

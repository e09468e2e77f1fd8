"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from capi.cli import exit_codes
from capi.cli.context import CommandContext, open_context
from capi.core.config import save_cli_config
from capi.core.errors import CapiError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_api(ctx: CommandContext) -> tuple[bool, str]:
    try:
        info = ctx.cc.info()
    except CapiError as exc:
        return False, str(exc)
    v3 = info.links.get("cloud_controller_v3")
    version = (v3.get("meta") or {}).get("version") if isinstance(v3, dict) else None
    return True, f"Cloud Controller {version}" if version else "reachable"


def _check_uaa(ctx: CommandContext) -> tuple[bool, str]:
    try:
        page = ctx.uaa().list_users(None, None, "id", None, 1, 1)
    except CapiError as exc:
        return False, str(exc)
    return True, f"{page.total_results} users visible"


@app.command()
def run(
    check_uaa: bool = typer.Option(False, "--uaa", help="Also query the UAA."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    table = Table(title="capi doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    failed = False
    with open_context() as ctx:
        renderer = ctx.renderer
        # Config
        if ctx.config_path.exists():
            table.add_row("Config file", "OK", str(ctx.config_path))
        else:
            table.add_row("Config file", "OPTIONAL", f"{ctx.config_path} (not created yet)")

        if ctx.api:
            table.add_row("API endpoint", "OK", ctx.api)
        else:
            table.add_row("API endpoint", "FAIL", "Run `capi doctor setup` or pass --api")
            failed = True

        if ctx.token:
            table.add_row("Token", "OK", "set")
        else:
            table.add_row("Token", "FAIL", "No bearer token configured")
            failed = True

        table.add_row("Output", "OK", ctx.output.value)

        # Connectivity (best-effort)
        if ctx.api:
            ok_api, detail_api = _check_api(ctx)
            table.add_row("API connectivity", "OK" if ok_api else "FAIL", detail_api)
            failed = failed or not ok_api

            if check_uaa:
                ok_uaa, detail_uaa = _check_uaa(ctx)
                table.add_row("UAA", "OK" if ok_uaa else "FAIL", detail_uaa)
                failed = failed or not ok_uaa

        # Target
        config = ctx.config
        if config.organization_guid:
            table.add_row("Target org", "OK", config.organization or config.organization_guid)
        else:
            table.add_row("Target org", "OPTIONAL", "Set with `capi target --org NAME`")
        if config.space_guid:
            table.add_row("Target space", "OK", config.space or config.space_guid)
        else:
            table.add_row("Target space", "OPTIONAL", "Set with `capi target --space NAME`")

    renderer.print_renderable(table)
    if failed:
        raise typer.Exit(exit_codes.GENERAL_ERROR)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores API endpoint and token in the config file)."""

    with open_context() as ctx:
        api = typer.prompt(
            "Cloud Controller API URL",
            default=ctx.api or "",
            show_default=bool(ctx.api),
        ).strip()
        token = typer.prompt("Bearer token", hide_input=True, confirmation_prompt=False).strip()
        uaa_endpoint = typer.prompt(
            "UAA URL (empty = discover from the API)",
            default=ctx.config.uaa_endpoint or "",
            show_default=False,
        ).strip()

        if not api:
            raise typer.BadParameter("API URL is required")

        path = save_cli_config(
            ctx.config_path,
            {"api": api, "token": token or None, "uaa_endpoint": uaa_endpoint or None},
        )

    _console.print(f"[green]Saved config to:[/green] {path}")

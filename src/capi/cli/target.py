"""`capi target`: muestra o cambia la org/space por defecto.

El target se guarda en el YAML de config (nombre + GUID). Cambiar de org
borra el space, salvo que en la misma llamada se dé `--space`.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from capi.adapters.output_renderer import Column, TableSpec
from capi.cli.context import CommandContext, open_context
from capi.core.config import load_cli_config, save_cli_config
from capi.core.domain.models import ScopeContext
from capi.core.domain.resource_kinds import ORGANIZATIONS, SPACES

TARGET_TABLE = TableSpec(
    columns=[
        Column("API", lambda t: t["api"]),
        Column("Organization", lambda t: t["organization"]),
        Column("Organization GUID", lambda t: t["organization_guid"]),
        Column("Space", lambda t: t["space"]),
        Column("Space GUID", lambda t: t["space_guid"]),
    ],
)


def _show(ctx: CommandContext) -> None:
    config = load_cli_config(ctx.config_path)
    current = {
        "api": ctx.api,
        "organization": config.organization,
        "organization_guid": config.organization_guid,
        "space": config.space,
        "space_guid": config.space_guid,
    }
    ctx.renderer.render(current, ctx.output, table=TARGET_TABLE)


def target(
    org: Optional[str] = typer.Option(None, "--org", "-o", help="Organization name or GUID."),
    space: Optional[str] = typer.Option(None, "--space", "-s", help="Space name or GUID."),
) -> None:
    """Show the current target, or set the default org and space."""

    with open_context() as ctx:
        if not org and not space:
            _show(ctx)
            return

        updates: dict[str, Any] = {}
        scope = ctx.scope

        if org:
            handle = ctx.resolver(ORGANIZATIONS).resolve(org, scope)
            updates.update(
                organization=handle.display_name,
                organization_guid=handle.id,
                space=None,
                space_guid=None,
            )
            scope = ScopeContext(organization_guid=handle.id)

        if space:
            found = ctx.resolver(SPACES).find(space, scope)
            updates.update(space=found.display_name(), space_guid=found.guid)
            owner = found.related_guid("organization")
            if owner and owner != scope.organization_guid:
                # Space de otra org: el nombre de la org guardada ya no aplica.
                updates.update(organization=None, organization_guid=owner)

        save_cli_config(ctx.config_path, updates)
        _show(ctx)

"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Cada tipo de recurso declara aquí su proyección de columnas; el renderer
  genérico hace el resto.
"""

from __future__ import annotations

from datetime import datetime

from capi.adapters.output_renderer import Column, TableSpec
from capi.core.domain.models import PageEnvelope, UAAGroup, UAAUser
from capi.core.domain.resource_kinds import ResourceKind


def format_date(value: datetime | None) -> str | None:
    return value.strftime("%Y-%m-%d") if value else None


_CREATED = Column("Created", lambda r: format_date(r.created_at))
_UPDATED = Column("Updated", lambda r: format_date(r.updated_at))
_GUID = Column("GUID", lambda r: r.guid, style="dim", no_wrap=True)
_NAME = Column("Name", lambda r: r.name, style="cyan", no_wrap=True)

_COLUMNS: dict[str, list[Column]] = {
    "apps": [
        _NAME,
        _GUID,
        Column("State", lambda r: r.state, style="green"),
        Column("Lifecycle", lambda r: r.lifecycle.get("type")),
        Column("Buildpacks", lambda r: r.buildpacks()),
        Column("Stack", lambda r: r.stack()),
        _CREATED,
        _UPDATED,
    ],
    "spaces": [
        _NAME,
        _GUID,
        Column("Organization", lambda r: r.related_guid("organization")),
        _CREATED,
        _UPDATED,
    ],
    "orgs": [
        _NAME,
        _GUID,
        Column("Suspended", lambda r: r.suspended),
        _CREATED,
        _UPDATED,
    ],
    "domains": [
        _NAME,
        _GUID,
        Column("Internal", lambda r: r.internal),
        Column("Organization", lambda r: r.related_guid("organization")),
        _CREATED,
    ],
    "services": [
        _NAME,
        _GUID,
        Column("Type", lambda r: r.type),
        Column(
            "Last Operation",
            lambda r: " ".join(
                str(v) for v in ((r.last_operation or {}).get("type"), (r.last_operation or {}).get("state")) if v
            ),
        ),
        Column("Space", lambda r: r.related_guid("space")),
        _CREATED,
    ],
    "routes": [
        Column("URL", lambda r: r.url, style="cyan", no_wrap=True),
        Column("Host", lambda r: r.host),
        Column("Path", lambda r: r.path),
        Column("Protocol", lambda r: r.protocol),
        _GUID,
        Column("Space", lambda r: r.related_guid("space")),
    ],
    "stacks": [
        _NAME,
        _GUID,
        Column("Description", lambda r: r.description),
        _CREATED,
    ],
    "buildpacks": [
        Column("Position", lambda r: r.position),
        _NAME,
        Column("Stack", lambda r: r.stack),
        Column("Enabled", lambda r: r.enabled),
        Column("Locked", lambda r: r.locked),
        Column("State", lambda r: r.state),
        _GUID,
    ],
}

QUOTA_TABLE = TableSpec(
    columns=[
        _NAME,
        _GUID,
        Column("Total Memory (MB)", lambda r: r.apps.get("total_memory_in_mb")),
        Column("Instance Memory (MB)", lambda r: r.apps.get("per_process_memory_in_mb")),
        Column("Instances", lambda r: r.apps.get("total_instances")),
        Column("App Tasks", lambda r: r.apps.get("per_app_tasks")),
        Column("Log Rate Limit (B/s)", lambda r: r.apps.get("log_rate_limit_in_bytes_per_second")),
    ],
    empty_message="No quotas found",
)


def resource_table(kind: ResourceKind) -> TableSpec:
    return TableSpec(
        columns=_COLUMNS[kind.cli_name],
        empty_message=f"No {kind.plural} found",
    )


def users_table() -> TableSpec:
    def _email(user: UAAUser) -> str | None:
        return user.primary_email()

    return TableSpec(
        columns=[
            Column("Username", lambda u: u.user_name, style="cyan", no_wrap=True),
            Column("ID", lambda u: u.id, style="dim", no_wrap=True),
            Column("Email", _email),
            Column("Origin", lambda u: u.origin),
            Column("Active", lambda u: u.active),
            Column("Verified", lambda u: u.verified),
        ],
        empty_message="No users found",
    )


def groups_table() -> TableSpec:
    def _members(group: UAAGroup) -> int:
        return len(group.members)

    return TableSpec(
        columns=[
            Column("Name", lambda g: g.display_name, style="cyan", no_wrap=True),
            Column("ID", lambda g: g.id, style="dim", no_wrap=True),
            Column("Description", lambda g: g.description),
            Column("Members", _members),
        ],
        empty_message="No groups found",
    )


def pagination_footer(first_page: PageEnvelope, all_pages: bool) -> str | None:
    """Aviso de que hay más páginas (solo tabla, sin --all)."""

    if all_pages or not first_page.has_more_pages():
        return None
    return (
        f"Showing page {first_page.page} of {first_page.total_pages}. "
        "Use --all to fetch all pages."
    )


def scim_footer(shown: int, total: int) -> str | None:
    if shown >= total:
        return None
    return f"Showing {shown} of {total}. Use --all to fetch all results."

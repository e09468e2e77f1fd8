"""Creación de quotas de organización y de space."""

from __future__ import annotations

from typing import Optional

import typer

from capi.cli.context import open_context
from capi.cli.ui_components import QUOTA_TABLE
from capi.core.domain.resource_kinds import ScopeLevel
from capi.core.services.app_limits import build_app_limits, build_quota_payload

org_quotas_app = typer.Typer(no_args_is_help=True, help="Manage organization quotas.")
space_quotas_app = typer.Typer(no_args_is_help=True, help="Manage space quotas.")

_TOTAL_MEMORY = typer.Option(None, "--total-memory", min=0, help="Total memory in MB.")
_INSTANCE_MEMORY = typer.Option(
    None, "--instance-memory", min=0, help="Memory per process in MB."
)
_INSTANCES = typer.Option(None, "--instances", min=0, help="Total app instances.")
_APP_TASKS = typer.Option(None, "--app-tasks", min=0, help="Tasks per app.")
_LOG_RATE_LIMIT = typer.Option(
    None, "--log-rate-limit", min=-1, help="Log rate limit in bytes/second (-1 = unlimited)."
)


@org_quotas_app.command("create")
def create_org_quota(
    name: str = typer.Argument(..., help="Quota name."),
    total_memory: Optional[int] = _TOTAL_MEMORY,
    instance_memory: Optional[int] = _INSTANCE_MEMORY,
    instances: Optional[int] = _INSTANCES,
    app_tasks: Optional[int] = _APP_TASKS,
    log_rate_limit: Optional[int] = _LOG_RATE_LIMIT,
) -> None:
    """Create an organization quota."""

    apps = build_app_limits(
        {
            "total_memory": total_memory,
            "instance_memory": instance_memory,
            "instances": instances,
            "app_tasks": app_tasks,
            "log_rate_limit": log_rate_limit,
        }
    )
    with open_context() as ctx:
        quota = ctx.cc.organization_quotas.create(build_quota_payload(name, apps))
        ctx.renderer.render(quota, ctx.output, table=QUOTA_TABLE)


@space_quotas_app.command("create")
def create_space_quota(
    name: str = typer.Argument(..., help="Quota name."),
    org: Optional[str] = typer.Option(
        None, "--org", help="Owning organization name or GUID (defaults to the target)."
    ),
    total_memory: Optional[int] = _TOTAL_MEMORY,
    instance_memory: Optional[int] = _INSTANCE_MEMORY,
    instances: Optional[int] = _INSTANCES,
    app_tasks: Optional[int] = _APP_TASKS,
    log_rate_limit: Optional[int] = _LOG_RATE_LIMIT,
) -> None:
    """Create a space quota owned by an organization."""

    apps = build_app_limits(
        {
            "total_memory": total_memory,
            "instance_memory": instance_memory,
            "instances": instances,
            "app_tasks": app_tasks,
            "log_rate_limit": log_rate_limit,
        }
    )
    with open_context() as ctx:
        org_guid = ctx.query_builder().require_scope(ScopeLevel.ORGANIZATION, org, ctx.scope)
        payload = build_quota_payload(
            name,
            apps,
            relationships={"organization": {"data": {"guid": org_guid}}},
        )
        quota = ctx.cc.space_quotas.create(payload)
        ctx.renderer.render(quota, ctx.output, table=QUOTA_TABLE)

"""Comandos `list` / `get` para cada tipo de recurso del Cloud Controller.

Por qué una fábrica:
- Los ocho tipos comparten exactamente el mismo flujo (QueryBuilder →
  ResourceClient → PageAccumulator → OutputRenderer); solo cambian la fila
  de `ResourceKind` y la proyección de columnas.
- El único detalle de firma que varía es la opción de scope (`--space`,
  `--org` o ninguna), así que hay una variante de `list` por nivel.
"""

from __future__ import annotations

from typing import List, Optional

import typer

from capi.cli.context import open_context
from capi.cli.ui_components import pagination_footer, resource_table
from capi.core.domain.output_format import OutputFormat
from capi.core.domain.query import MAX_PER_PAGE
from capi.core.domain.resource_kinds import ResourceKind, ScopeLevel
from capi.core.services.page_accumulator import list_resources


def list_kind(
    kind: ResourceKind,
    *,
    scope_name: Optional[str],
    all_pages: bool,
    per_page: Optional[int],
    names: Optional[List[str]],
    label_selector: Optional[str],
    order_by: Optional[str],
) -> None:
    terms = [kind.model.search_term(n) for n in names or ()]
    with open_context() as ctx:
        query = ctx.query_builder().build(
            level=kind.scope,
            scope=ctx.scope,
            explicit_name=scope_name,
            extra_filters={kind.name_filter: terms or None},
            per_page=per_page or ctx.settings.per_page,
            order_by=order_by,
            label_selector=label_selector,
        )
        items, first_page = list_resources(ctx.cc.resources(kind), query, all_pages)

        footer = None
        if ctx.output is OutputFormat.TABLE:
            footer = pagination_footer(first_page, all_pages)
        ctx.renderer.render(items, ctx.output, table=resource_table(kind), footer=footer)


def get_kind(kind: ResourceKind, name_or_id: str) -> None:
    with open_context() as ctx:
        resource = ctx.resolver(kind).find(name_or_id, ctx.scope)
        ctx.renderer.render(resource, ctx.output, table=resource_table(kind))


def build_resource_app(kind: ResourceKind) -> typer.Typer:
    app = typer.Typer(no_args_is_help=True, help=f"Inspect {kind.plural}.")
    # Las rutas se filtran por host; `--name` queda como alias.
    name_flags = ("--name",) if kind.name_label == "name" else (f"--{kind.name_label}", "--name")

    if kind.scope is ScopeLevel.NONE:

        @app.command("list", help=f"List {kind.plural}.")
        def list_unscoped(
            all_pages: bool = typer.Option(False, "--all", help="Fetch every page."),
            per_page: Optional[int] = typer.Option(
                None, "--per-page", min=1, max=MAX_PER_PAGE, help="Results per page."
            ),
            names: Optional[List[str]] = typer.Option(
                None, *name_flags, help=f"Filter by {kind.name_label} (repeatable)."
            ),
            label_selector: Optional[str] = typer.Option(
                None, "--label-selector", "-l", help="Metadata label selector."
            ),
            order_by: Optional[str] = typer.Option(None, "--order-by", help="Sort field."),
        ) -> None:
            list_kind(
                kind,
                scope_name=None,
                all_pages=all_pages,
                per_page=per_page,
                names=names,
                label_selector=label_selector,
                order_by=order_by,
            )
    else:
        flag = "--space" if kind.scope is ScopeLevel.SPACE else "--org"

        @app.command("list", help=f"List {kind.plural} in the targeted {kind.scope.value}.")
        def list_scoped(
            scope_name: Optional[str] = typer.Option(
                None,
                flag,
                help=f"{kind.scope.value.capitalize()} name or GUID (defaults to the target).",
            ),
            all_pages: bool = typer.Option(False, "--all", help="Fetch every page."),
            per_page: Optional[int] = typer.Option(
                None, "--per-page", min=1, max=MAX_PER_PAGE, help="Results per page."
            ),
            names: Optional[List[str]] = typer.Option(
                None, *name_flags, help=f"Filter by {kind.name_label} (repeatable)."
            ),
            label_selector: Optional[str] = typer.Option(
                None, "--label-selector", "-l", help="Metadata label selector."
            ),
            order_by: Optional[str] = typer.Option(None, "--order-by", help="Sort field."),
        ) -> None:
            list_kind(
                kind,
                scope_name=scope_name,
                all_pages=all_pages,
                per_page=per_page,
                names=names,
                label_selector=label_selector,
                order_by=order_by,
            )

    @app.command("get", help=f"Show a single {kind.singular} by name or GUID.")
    def get(
        name_or_id: str = typer.Argument(..., metavar="NAME_OR_GUID"),
    ) -> None:
        get_kind(kind, name_or_id)

    return app

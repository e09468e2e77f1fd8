"""Usuarios y grupos del UAA (SCIM).

Sin `--all` se pide una sola ventana (`startIndex=1`); con `--all` el
recorrido completo lo hace `PaginatedFetcher`, que cachea el resultado por
combinación de filtro/orden/atributos durante el proceso.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from capi.adapters.output_renderer import TableSpec
from capi.cli.context import list_cache, open_context
from capi.cli.ui_components import groups_table, scim_footer, users_table
from capi.core.domain.output_format import OutputFormat
from capi.core.services.page_accumulator import PaginatedFetcher, ScimListFunc

users_app = typer.Typer(no_args_is_help=True, help="Inspect UAA users.")
groups_app = typer.Typer(no_args_is_help=True, help="Inspect UAA groups.")

_FILTER = typer.Option(None, "--filter", help='SCIM filter, e.g. \'userName eq "admin"\'.')
_SORT_BY = typer.Option(None, "--sort-by", help="Attribute to sort by.")
_SORT_ORDER = typer.Option(None, "--sort-order", help="ascending or descending.")
_ATTRIBUTES = typer.Option(None, "--attributes", help="Comma-separated attributes to return.")
_ALL = typer.Option(False, "--all", help="Fetch every result.")
_COUNT = typer.Option(None, "--count", min=1, help="Results per request.")


def _check_sort_order(sort_order: Optional[str]) -> Optional[str]:
    if sort_order is None:
        return None
    value = sort_order.strip().lower()
    if value not in {"ascending", "descending"}:
        raise typer.BadParameter("must be 'ascending' or 'descending'", param_hint="--sort-order")
    return value


def list_scim(
    cache_prefix: str,
    pick: Any,
    table: TableSpec,
    *,
    filter: Optional[str],
    sort_by: Optional[str],
    sort_order: Optional[str],
    attributes: Optional[str],
    all_results: bool,
    count: Optional[int],
) -> None:
    """Flujo común de `users list` / `groups list`.

    `pick` recibe el `UAAClient` y devuelve el método de listado (se abre el
    cliente dentro del contexto, no antes).
    """

    sort_order = _check_sort_order(sort_order)
    with open_context() as ctx:
        list_func: ScimListFunc[Any] = pick(ctx.uaa())
        page_size = count or ctx.settings.uaa_page_size

        footer = None
        if all_results:
            fetcher: PaginatedFetcher[Any] = PaginatedFetcher(
                cache=list_cache,
                max_pages=ctx.settings.uaa_max_pages,
                page_size=page_size,
            )
            items = fetcher.fetch_all_resources(
                cache_prefix,
                list_func,
                filter=filter,
                sort_by=sort_by,
                attributes=attributes,
                sort_order=sort_order,
            )
        else:
            page = list_func(filter, sort_by, attributes, sort_order, 1, page_size)
            items = page.resources
            if ctx.output is OutputFormat.TABLE:
                footer = scim_footer(len(items), page.total_results)

        ctx.renderer.render(items, ctx.output, table=table, footer=footer)


@users_app.command("list")
def list_users(
    filter: Optional[str] = _FILTER,
    sort_by: Optional[str] = _SORT_BY,
    sort_order: Optional[str] = _SORT_ORDER,
    attributes: Optional[str] = _ATTRIBUTES,
    all_results: bool = _ALL,
    count: Optional[int] = _COUNT,
) -> None:
    """List UAA users."""

    list_scim(
        "uaa:users",
        lambda uaa: uaa.list_users,
        users_table(),
        filter=filter,
        sort_by=sort_by,
        sort_order=sort_order,
        attributes=attributes,
        all_results=all_results,
        count=count,
    )


@groups_app.command("list")
def list_groups(
    filter: Optional[str] = _FILTER,
    sort_by: Optional[str] = _SORT_BY,
    sort_order: Optional[str] = _SORT_ORDER,
    attributes: Optional[str] = _ATTRIBUTES,
    all_results: bool = _ALL,
    count: Optional[int] = _COUNT,
) -> None:
    """List UAA groups."""

    list_scim(
        "uaa:groups",
        lambda uaa: uaa.list_groups,
        groups_table(),
        filter=filter,
        sort_by=sort_by,
        sort_order=sort_order,
        attributes=attributes,
        all_results=all_results,
        count=count,
    )

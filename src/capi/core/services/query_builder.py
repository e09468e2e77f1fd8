"""Construcción de `QueryFilter` a partir de flags y del scope targeteado.

Reglas (en orden):
1. Si el usuario nombró un scope (`--space NAME` / `--org NAME`), se resuelve
   a GUID con el Resolver del recurso "padre" y se filtra por él.
2. Si no, y la config tiene un space/org targeteado, se inyecta ese GUID.
3. Si no hay ninguno, la consulta queda sin scope (puede devolver recursos de
   otros spaces/orgs; es responsabilidad del llamador decidir si le sirve).
"""

from __future__ import annotations

from typing import Mapping, Sequence

from loguru import logger

from capi.core.domain.models import ScopeContext
from capi.core.domain.query import QueryFilter
from capi.core.domain.resource_kinds import ScopeLevel
from capi.core.errors import ScopeRequiredError
from capi.core.services.resolver import Resolver


class QueryBuilder:
    """Fábrica de filtros para los `list` de cualquier tipo de recurso.

    `scope_resolvers` mapea cada nivel de scope al Resolver del recurso que lo
    define (space → spaces, organization → organizations).
    """

    def __init__(self, scope_resolvers: Mapping[ScopeLevel, Resolver]) -> None:
        self._scope_resolvers = dict(scope_resolvers)

    def resolve_scope(
        self,
        level: ScopeLevel,
        explicit_name: str | None,
        scope: ScopeContext,
    ) -> str | None:
        """GUID del scope: nombre explícito > scope targeteado > ninguno."""

        if explicit_name:
            resolver = self._scope_resolvers.get(level)
            if resolver is None:
                raise ValueError(f"no resolver registered for scope level '{level.value}'")
            handle = resolver.resolve(explicit_name, scope)
            logger.debug(f"Scope {level.value} '{explicit_name}' resolved to {handle.id}")
            return handle.id
        return level.guid_in(scope)

    def require_scope(
        self,
        level: ScopeLevel,
        explicit_name: str | None,
        scope: ScopeContext,
    ) -> str:
        guid = self.resolve_scope(level, explicit_name, scope)
        if not guid:
            flag = "--space" if level is ScopeLevel.SPACE else "--org"
            raise ScopeRequiredError(
                f"{level.value} is required",
                hint=f"Use {flag} or target one with `capi target`.",
            )
        return guid

    def build(
        self,
        *,
        level: ScopeLevel,
        scope: ScopeContext,
        explicit_name: str | None = None,
        extra_filters: Mapping[str, str | Sequence[str] | None] | None = None,
        per_page: int | None = None,
        order_by: str | None = None,
        label_selector: str | None = None,
    ) -> QueryFilter:
        query = QueryFilter(per_page=per_page, order_by=order_by, label_selector=label_selector)

        key = level.filter_key()
        if key is not None:
            guid = self.resolve_scope(level, explicit_name, scope)
            if guid:
                query.with_filter(key, guid)
            else:
                logger.debug(f"No {level.value} scope given or targeted; query is unscoped")
        elif explicit_name:
            raise ValueError("explicit scope given for an unscoped resource kind")

        for name, value in (extra_filters or {}).items():
            if value is None:
                continue
            if isinstance(value, str):
                query.with_filter(name, value)
            else:
                query.with_filter(name, *value)
        return query

"""Resolución de "nombre o GUID" a un `ResourceHandle`.

The same algorithm applies to every resource kind:

1. Fast path: ``client.get(value)`` treating the input as a GUID. Only a
   :class:`ResourceNotFoundAPIError` means "not a GUID"; auth and transport
   failures propagate instead of being retried as a name search.
2. Name search: the kind's name filter (``names``, or ``hosts`` for routes)
   plus the active scope filter, first page only. Matches the filter cannot
   tell apart (a host on several domains) are dropped by ``accepts``.
3. Zero matches raise :class:`NotFoundError` with the literal input.
4. Several matches return the first one in API order (logged as a warning),
   or raise :class:`AmbiguousMatchError` when the resolver is strict.

Nothing is memoized: resolving twice costs two round trips.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from loguru import logger

from capi.core.domain.models import ResourceHandle, ScopeContext
from capi.core.domain.query import QueryFilter
from capi.core.domain.resource_kinds import ResourceKind, ScopeLevel
from capi.core.errors import AmbiguousMatchError, NotFoundError, ResourceNotFoundAPIError
from capi.core.interfaces.resource_client import ResourceClient

T = TypeVar("T")


def _default_handle(resource: object) -> ResourceHandle:
    return resource.to_handle()  # type: ignore[attr-defined]


def _same(identifier: str) -> str:
    return identifier


class Resolver(Generic[T]):
    """Resolver genérico sobre un `ResourceClient`."""

    def __init__(
        self,
        client: ResourceClient[T],
        *,
        label: str = "resource",
        scope_level: ScopeLevel = ScopeLevel.NONE,
        strict: bool = False,
        handle_of: Callable[[T], ResourceHandle] = _default_handle,
        name_filter: str = "names",
        search_term: Callable[[str], str] = _same,
        accepts: Callable[[T, str], bool] | None = None,
    ) -> None:
        self._client = client
        self._label = label
        self._scope_level = scope_level
        self._strict = strict
        self._handle_of = handle_of
        self._name_filter = name_filter
        self._search_term = search_term
        self._accepts = accepts

    @classmethod
    def for_kind(
        cls, client: ResourceClient[T], kind: ResourceKind, *, strict: bool = False
    ) -> "Resolver[T]":
        """Resolver con el scope y el filtro de nombre de `kind`."""

        return cls(
            client,
            label=kind.singular,
            scope_level=kind.scope,
            strict=strict,
            name_filter=kind.name_filter,
            search_term=kind.model.search_term,
            accepts=kind.model.matches_identifier,
        )

    def name_query(self, name: str, scope: ScopeContext) -> QueryFilter:
        query = QueryFilter().with_filter(self._name_filter, self._search_term(name))
        key = self._scope_level.filter_key()
        if key is None:
            return query
        guid = self._scope_level.guid_in(scope)
        if guid:
            query.with_filter(key, guid)
        return query

    def find(self, name_or_id: str, scope: ScopeContext) -> T:
        """Devuelve el recurso completo (no solo el handle)."""

        try:
            return self._client.get(name_or_id)
        except ResourceNotFoundAPIError:
            logger.debug(
                f"'{name_or_id}' is not a {self._label} GUID; searching by {self._name_filter}"
            )

        page = self._client.list(self.name_query(name_or_id, scope))
        matches = list(page.items)
        if self._accepts is not None:
            matches = [m for m in matches if self._accepts(m, name_or_id)]
        if not matches:
            raise NotFoundError(name_or_id, kind=self._label)

        if len(matches) > 1:
            handles = [self._handle_of(m) for m in matches]
            if self._strict:
                raise AmbiguousMatchError(name_or_id, handles, kind=self._label)
            logger.warning(
                f"{len(matches)} {self._label}s named '{name_or_id}'; "
                f"using {handles[0].id}"
            )
        return matches[0]

    def resolve(self, name_or_id: str, scope: ScopeContext) -> ResourceHandle:
        return self._handle_of(self.find(name_or_id, scope))

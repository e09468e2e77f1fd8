"""Contratos de acceso a recursos y de paginación.

Por qué Protocol:
- Contrato estructural (duck typing): el Resolver y el PageAccumulator no
  conocen httpx, solo `get`/`list`.
- Reemplaza la introspección en runtime de structs de paginación por un
  accessor tipado (`total_results`).
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from capi.core.domain.models import PageEnvelope
from capi.core.domain.query import QueryFilter

T = TypeVar("T")


@runtime_checkable
class ResourceClient(Protocol[T]):
    """Cliente mínimo de un tipo de recurso.

    Reglas de diseño:
    - `get` debe señalar "no existe" con `ResourceNotFoundAPIError` y no con
      un error genérico: el Resolver solo cae a la búsqueda por nombre en ese
      caso.
    - `list` devuelve una única página; recorrer el resto es trabajo del
      PageAccumulator.
    """

    def get(self, guid: str) -> T:
        ...

    def list(self, query: QueryFilter) -> PageEnvelope[T]:
        ...


@runtime_checkable
class Pager(Protocol):
    """Cualquier página que sepa cuántos resultados hay en total."""

    @property
    def total_results(self) -> int:
        ...

"""Contrato de cache tipado (clave → valor).

Sustituye la llamada dinámica a métodos `Get`/`Set` por una interfaz
explícita que el PaginatedFetcher puede usar sin conocer el backend.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

K = TypeVar("K", contravariant=True)
V = TypeVar("V")


@runtime_checkable
class Cache(Protocol[K, V]):
    def get(self, key: K) -> V | None:
        """Devuelve el valor cacheado o `None` si no existe."""

        ...

    def put(self, key: K, value: V) -> None:
        ...

"""Descriptor de filtros y paginación para los `list` del Cloud Controller.

Por qué un modelo propio:
- Los comandos construyen filtros a partir de flags y del scope targeteado;
  este objeto es el contrato entre QueryBuilder, Resolver y los clientes HTTP.
- `to_params()` concentra el formato de query string de la API V3 (valores
  múltiples unidos por comas).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 5000


class QueryFilter(BaseModel):
    """Filtros ordenados (clave → valores) más `page`/`per_page`."""

    filters: dict[str, list[str]] = Field(default_factory=dict)
    page: int = Field(default=1, ge=1)
    per_page: int | None = Field(default=None, ge=1, le=MAX_PER_PAGE)
    order_by: str | None = None
    label_selector: str | None = None

    def with_filter(self, key: str, *values: str) -> "QueryFilter":
        """Añade valores a un filtro; los valores vacíos se ignoran."""

        cleaned = [v for v in values if v]
        if not cleaned:
            return self
        self.filters.setdefault(key, []).extend(cleaned)
        return self

    def has_filter(self, key: str) -> bool:
        return bool(self.filters.get(key))

    def for_page(self, page: int) -> "QueryFilter":
        """Copia del filtro apuntando a otra página (el original no cambia)."""

        return self.model_copy(update={"page": page}, deep=True)

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.page > 1:
            params["page"] = str(self.page)
        if self.per_page is not None:
            params["per_page"] = str(self.per_page)
        if self.order_by:
            params["order_by"] = self.order_by
        if self.label_selector:
            params["label_selector"] = self.label_selector
        for key, values in self.filters.items():
            if values:
                params[key] = ",".join(values)
        return params

"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación en el borde (payloads del Cloud Controller / UAA) sin acoplar
  el Core a httpx ni a la CLI.
- Serialización estable (`model_dump(mode="json")`) para los renderers
  JSON/YAML.

Nota:
- Los recursos aceptan campos extra (`extra="allow"`): la API devuelve mucho
  más de lo que la CLI proyecta en tablas, y el modo JSON/YAML debe mostrarlo
  completo.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ResourceHandle(BaseModel):
    """Resultado canónico de resolver un "nombre o GUID".

    La identidad es `id`; `display_name` solo se usa en mensajes.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="GUID del recurso.")
    display_name: str = Field(
        default="",
        description="Nombre legible (informativo, no identifica).",
    )


class ScopeContext(BaseModel):
    """Scope ambiental (org/space targeteados) leído de la config persistida."""

    model_config = ConfigDict(frozen=True)

    space_guid: str | None = Field(default=None, description="Space targeteado.")
    organization_guid: str | None = Field(default=None, description="Org targeteada.")


class Metadata(BaseModel):
    labels: dict[str, str | None] = Field(default_factory=dict)
    annotations: dict[str, str | None] = Field(default_factory=dict)


class Resource(BaseModel):
    """Base común de todos los recursos V3 (`guid`, timestamps, links)."""

    model_config = ConfigDict(extra="allow")

    guid: str = Field(..., min_length=1, description="Identificador del recurso.")
    name: str | None = Field(default=None, description="Nombre (si el recurso lo tiene).")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    relationships: dict[str, Any] = Field(default_factory=dict)
    metadata: Metadata = Field(default_factory=Metadata)
    links: dict[str, Any] = Field(default_factory=dict)

    def display_name(self) -> str:
        return self.name or self.guid

    def related_guid(self, relation: str) -> str | None:
        """GUID de una relación to-one (`relationships.<relation>.data.guid`)."""

        rel = self.relationships.get(relation)
        if not isinstance(rel, dict):
            return None
        data = rel.get("data")
        if isinstance(data, dict) and isinstance(data.get("guid"), str):
            return data["guid"]
        return None

    def to_handle(self) -> ResourceHandle:
        return ResourceHandle(id=self.guid, display_name=self.display_name())

    @classmethod
    def search_term(cls, identifier: str) -> str:
        """Valor que se manda en el filtro de nombre para `identifier`."""

        return identifier

    def matches_identifier(self, identifier: str) -> bool:
        # El filtro `names` ya es exacto en el servidor.
        return True


class App(Resource):
    state: str | None = None
    lifecycle: dict[str, Any] = Field(default_factory=dict)

    def buildpacks(self) -> list[str]:
        data = self.lifecycle.get("data") or {}
        value = data.get("buildpacks") if isinstance(data, dict) else None
        return [str(b) for b in value] if isinstance(value, list) else []

    def stack(self) -> str | None:
        data = self.lifecycle.get("data") or {}
        value = data.get("stack") if isinstance(data, dict) else None
        return value if isinstance(value, str) else None


class Space(Resource):
    pass


class Organization(Resource):
    suspended: bool | None = None


class Domain(Resource):
    internal: bool | None = None


class ServiceInstance(Resource):
    type: str | None = None
    last_operation: dict[str, Any] | None = None


class Route(Resource):
    host: str | None = None
    path: str | None = None
    url: str | None = None
    protocol: str | None = None

    def display_name(self) -> str:
        return self.url or self.host or self.guid

    @classmethod
    def search_term(cls, identifier: str) -> str:
        """Las rutas no tienen nombre: se buscan por host.

        `myhost.example.com/path` → `myhost`; un host suelto queda igual.
        """

        return identifier.split("/", 1)[0].split(".", 1)[0]

    def matches_identifier(self, identifier: str) -> bool:
        # `hosts` no distingue dominios: se confirma contra la URL completa.
        return identifier in (self.url, self.host)


class Stack(Resource):
    description: str | None = None


class Buildpack(Resource):
    stack: str | None = None
    position: int | None = None
    enabled: bool | None = None
    locked: bool | None = None
    state: str | None = None


class OrganizationQuota(Resource):
    apps: dict[str, Any] = Field(default_factory=dict)


class SpaceQuota(Resource):
    apps: dict[str, Any] = Field(default_factory=dict)


class ApiInfo(BaseModel):
    """Root document del Cloud Controller (`GET /`)."""

    model_config = ConfigDict(extra="allow")

    links: dict[str, Any] = Field(default_factory=dict)

    def link(self, name: str) -> str | None:
        value = self.links.get(name)
        if isinstance(value, dict) and isinstance(value.get("href"), str):
            return value["href"]
        return None


T = TypeVar("T")


class PageEnvelope(BaseModel, Generic[T]):
    """Una página de una respuesta paginada (V3) más su metadata.

    `page` no viene en el payload del Cloud Controller: se conserva el número
    pedido en el `QueryFilter`.
    """

    items: list[T] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    per_page: int | None = Field(default=None, ge=1)
    total_pages: int = Field(default=0, ge=0)
    total_results: int = Field(default=0, ge=0)

    def has_more_pages(self) -> bool:
        return self.total_pages > self.page


class ScimPage(BaseModel, Generic[T]):
    """Página SCIM del UAA (paginación por `startIndex`/`count`)."""

    resources: list[T] = Field(default_factory=list)
    start_index: int = Field(default=1, ge=1)
    items_per_page: int = Field(default=0, ge=0)
    total_results: int = Field(default=0, ge=0)


class UAAEmail(BaseModel):
    value: str
    primary: bool = False


class UAAUser(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    user_name: str = Field(..., alias="userName")
    origin: str | None = None
    active: bool | None = None
    verified: bool | None = None
    emails: list[UAAEmail] = Field(default_factory=list)

    def primary_email(self) -> str | None:
        for email in self.emails:
            if email.primary:
                return email.value
        return self.emails[0].value if self.emails else None


class UAAGroup(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    display_name: str = Field(..., alias="displayName")
    description: str | None = None
    members: list[dict[str, Any]] = Field(default_factory=list)

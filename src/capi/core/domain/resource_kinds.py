"""Catálogo data-driven de tipos de recurso.

Idea:
- En vez de repetir la misma lógica de "resolver / listar / renderizar" en un
  módulo por recurso, cada tipo se describe con una fila de esta tabla y los
  componentes genéricos (QueryBuilder, Resolver, comandos) la consumen.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from capi.core.domain.models import (
    App,
    Buildpack,
    Domain,
    Organization,
    Resource,
    Route,
    ScopeContext,
    ServiceInstance,
    Space,
    Stack,
)


class ScopeLevel(str, Enum):
    """Nivel de scope que restringe las búsquedas de un tipo de recurso."""

    SPACE = "space"
    ORGANIZATION = "organization"
    NONE = "none"

    def filter_key(self) -> str | None:
        if self is ScopeLevel.SPACE:
            return "space_guids"
        if self is ScopeLevel.ORGANIZATION:
            return "organization_guids"
        return None

    def guid_in(self, scope: ScopeContext) -> str | None:
        """GUID ambiental que aplica a este nivel de scope."""

        if self is ScopeLevel.SPACE:
            return scope.space_guid
        if self is ScopeLevel.ORGANIZATION:
            return scope.organization_guid
        return None


@dataclass(frozen=True)
class ResourceKind:
    """Descripción de un tipo de recurso del Cloud Controller."""

    cli_name: str
    path: str
    singular: str
    plural: str
    scope: ScopeLevel
    model: type[Resource]
    name_filter: str = "names"
    name_label: str = "name"


APPS = ResourceKind("apps", "apps", "application", "applications", ScopeLevel.SPACE, App)
SPACES = ResourceKind("spaces", "spaces", "space", "spaces", ScopeLevel.ORGANIZATION, Space)
ORGANIZATIONS = ResourceKind(
    "orgs", "organizations", "organization", "organizations", ScopeLevel.NONE, Organization
)
DOMAINS = ResourceKind("domains", "domains", "domain", "domains", ScopeLevel.ORGANIZATION, Domain)
SERVICE_INSTANCES = ResourceKind(
    "services",
    "service_instances",
    "service instance",
    "service instances",
    ScopeLevel.SPACE,
    ServiceInstance,
)
ROUTES = ResourceKind(
    "routes",
    "routes",
    "route",
    "routes",
    ScopeLevel.SPACE,
    Route,
    name_filter="hosts",
    name_label="host",
)
STACKS = ResourceKind("stacks", "stacks", "stack", "stacks", ScopeLevel.NONE, Stack)
BUILDPACKS = ResourceKind(
    "buildpacks", "buildpacks", "buildpack", "buildpacks", ScopeLevel.NONE, Buildpack
)

RESOURCE_KINDS: tuple[ResourceKind, ...] = (
    APPS,
    SPACES,
    ORGANIZATIONS,
    DOMAINS,
    SERVICE_INSTANCES,
    ROUTES,
    STACKS,
    BUILDPACKS,
)

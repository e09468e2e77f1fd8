"""Cliente del Cloud Controller V3.

Un único `ResourceClient` genérico (parametrizado por path + modelo) cubre
todos los tipos de recurso; `CloudControllerClient` solo los agrupa.
"""

from __future__ import annotations

import re
from typing import Any, Generic, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from capi.adapters.http_client import build_client, request_json
from capi.core.config import AppSettings
from capi.core.domain.models import (
    ApiInfo,
    OrganizationQuota,
    PageEnvelope,
    Resource,
    SpaceQuota,
)
from capi.core.domain.query import QueryFilter
from capi.core.domain.resource_kinds import RESOURCE_KINDS, ResourceKind
from capi.core.errors import APIError, ResourceNotFoundAPIError

R = TypeVar("R", bound=Resource)

# Letras, dígitos, `-` y `_`; nada que pueda cambiar el path (`/`, `.`, `..`).
_GUID_SHAPE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*")


def parse_page(payload: Any, model: type[R], query: QueryFilter) -> PageEnvelope[R]:
    """Convierte `{"pagination": {...}, "resources": [...]}` en un `PageEnvelope`."""

    if not isinstance(payload, dict):
        raise APIError("unexpected list response", status_code=200)
    pagination = payload.get("pagination") or {}
    try:
        items = [model.model_validate(r) for r in payload.get("resources") or []]
    except ValidationError as exc:
        raise APIError(f"unexpected resource payload: {exc}", status_code=200) from exc
    return PageEnvelope(
        items=items,
        page=query.page,
        per_page=query.per_page,
        total_pages=int(pagination.get("total_pages") or 0),
        total_results=int(pagination.get("total_results") or 0),
    )


class ResourceClient(Generic[R]):
    """`get`/`list`/`create` sobre `/v3/<path>`."""

    def __init__(self, http: httpx.Client, path: str, model: type[R]) -> None:
        self._http = http
        self._path = f"/v3/{path}"
        self._model = model

    def get(self, guid: str) -> R:
        if not _GUID_SHAPE.fullmatch(guid):
            raise ResourceNotFoundAPIError(f"'{guid}' is not a GUID", status_code=404)
        payload = request_json(self._http, "GET", f"{self._path}/{quote(guid, safe='')}")
        try:
            return self._model.model_validate(payload)
        except ValidationError as exc:
            raise APIError(f"unexpected resource payload: {exc}", status_code=200) from exc

    def list(self, query: QueryFilter) -> PageEnvelope[R]:
        payload = request_json(self._http, "GET", self._path, params=query.to_params())
        return parse_page(payload, self._model, query)

    def create(self, body: dict[str, Any]) -> R:
        payload = request_json(self._http, "POST", self._path, json=body)
        try:
            return self._model.model_validate(payload)
        except ValidationError as exc:
            raise APIError(f"unexpected resource payload: {exc}", status_code=201) from exc


class CloudControllerClient:
    """Punto de entrada al Cloud Controller (uno por invocación de comando)."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http
        self._clients: dict[str, ResourceClient[Any]] = {
            kind.cli_name: ResourceClient(http, kind.path, kind.model) for kind in RESOURCE_KINDS
        }
        self.organization_quotas = ResourceClient(http, "organization_quotas", OrganizationQuota)
        self.space_quotas = ResourceClient(http, "space_quotas", SpaceQuota)

    @classmethod
    def from_settings(cls, api: str, settings: AppSettings, token: str | None) -> "CloudControllerClient":
        return cls(build_client(api, settings, token=token))

    def resources(self, kind: ResourceKind) -> ResourceClient[Any]:
        return self._clients[kind.cli_name]

    def info(self) -> ApiInfo:
        return ApiInfo.model_validate(request_json(self._http, "GET", "/") or {})

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CloudControllerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

"""Cliente del UAA (identity management, SCIM).

El UAA pagina por offset (`startIndex`/`count`) y devuelve `totalResults`;
el recorrido completo lo hace `PaginatedFetcher`.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from capi.adapters.http_client import build_client, request_json
from capi.core.config import AppSettings
from capi.core.domain.models import ScimPage, UAAGroup, UAAUser
from capi.core.errors import APIError

M = TypeVar("M", bound=BaseModel)


def scim_params(
    filter: str | None,
    sort_by: str | None,
    attributes: str | None,
    sort_order: str | None,
    start_index: int,
    count: int,
) -> dict[str, str]:
    params = {"startIndex": str(start_index), "count": str(count)}
    if filter:
        params["filter"] = filter
    if sort_by:
        params["sortBy"] = sort_by
    if sort_order:
        params["sortOrder"] = sort_order
    if attributes:
        params["attributes"] = attributes
    return params


def parse_scim_page(payload: Any, model: type[M]) -> ScimPage[M]:
    if not isinstance(payload, dict):
        raise APIError("unexpected SCIM response", status_code=200)
    try:
        resources = [model.model_validate(r) for r in payload.get("resources") or []]
    except ValidationError as exc:
        raise APIError(f"unexpected SCIM resource: {exc}", status_code=200) from exc
    return ScimPage(
        resources=resources,
        start_index=int(payload.get("startIndex") or 1),
        items_per_page=int(payload.get("itemsPerPage") or len(resources)),
        total_results=int(payload.get("totalResults") or 0),
    )


class UAAClient:
    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, endpoint: str, settings: AppSettings, token: str | None) -> "UAAClient":
        return cls(build_client(endpoint, settings, token=token))

    def _list(self, path: str, model: type[M], params: dict[str, str]) -> ScimPage[M]:
        return parse_scim_page(request_json(self._http, "GET", path, params=params), model)

    def list_users(
        self,
        filter: str | None,
        sort_by: str | None,
        attributes: str | None,
        sort_order: str | None,
        start_index: int,
        count: int,
    ) -> ScimPage[UAAUser]:
        params = scim_params(filter, sort_by, attributes, sort_order, start_index, count)
        return self._list("/Users", UAAUser, params)

    def list_groups(
        self,
        filter: str | None,
        sort_by: str | None,
        attributes: str | None,
        sort_order: str | None,
        start_index: int,
        count: int,
    ) -> ScimPage[UAAGroup]:
        params = scim_params(filter, sort_by, attributes, sort_order, start_index, count)
        return self._list("/Groups", UAAGroup, params)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "UAAClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

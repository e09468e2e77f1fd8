"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, token y logging para el Cloud Controller y
  el UAA.
- Traduce errores de httpx / respuestas de error de la API a la jerarquía
  tipada de `capi.core.errors` (ningún `httpx.*Error` sale de adapters).
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from capi.core.config import AppSettings
from capi.core.errors import (
    CF_CODE_NOT_AUTHENTICATED,
    CF_CODE_NOT_AUTHORIZED,
    CF_CODE_RESOURCE_NOT_FOUND,
    APIError,
    AuthError,
    ResourceNotFoundAPIError,
    TransportError,
)


def build_client(
    base_url: str,
    settings: AppSettings | None = None,
    *,
    token: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` síncrono con defaults seguros.

    Por qué síncrono:
    - Cada comando hace una cadena de llamadas dependientes (scope → lista →
      páginas), sin concurrencia que aprovechar.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if token:
        headers["Authorization"] = token if token.lower().startswith("bearer ") else f"Bearer {token}"
    return httpx.Client(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=not settings.skip_ssl_validation,
        transport=transport,
    )


def _first_api_error(response: httpx.Response) -> dict[str, Any]:
    """Primer elemento del sobre de error V3 (`{"errors": [...]}`) si existe."""

    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return errors[0]
        # UAA usa {"error": ..., "error_description": ...}
        if "error" in body:
            return {"title": body.get("error"), "detail": body.get("error_description")}
    return {}


def raise_for_api_error(response: httpx.Response) -> None:
    if response.is_success:
        return

    info = _first_api_error(response)
    code = info.get("code") if isinstance(info.get("code"), int) else None
    title = info.get("title")
    detail = info.get("detail")
    status = response.status_code

    message = f"{title}: {detail}" if title and detail else (detail or title or f"HTTP {status}")
    if code is not None:
        message = f"{message} (code: {code})"

    kwargs: dict[str, Any] = {"status_code": status, "code": code, "title": title, "detail": detail}
    if status == 404 or code == CF_CODE_RESOURCE_NOT_FOUND:
        raise ResourceNotFoundAPIError(message, **kwargs)
    if status in (401, 403) or code in (CF_CODE_NOT_AUTHENTICATED, CF_CODE_NOT_AUTHORIZED):
        raise AuthError(
            message,
            hint="Check your token (`--token` or CAPI_TOKEN) or log in again.",
            **kwargs,
        )
    raise APIError(message, **kwargs)


def request_json(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    params: dict[str, str] | None = None,
    json: Any = None,
) -> Any:
    """Ejecuta un request y devuelve el JSON (o `None` si no hay cuerpo)."""

    logger.debug(f"{method} {path} params={params or {}}")
    try:
        response = client.request(method, path, params=params, json=json)
    except httpx.TimeoutException as exc:
        raise TransportError(f"request to {path} timed out", hint="Retry or raise CAPI_HTTP_TIMEOUT_SECONDS.") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"request to {path} failed: {exc}") from exc

    raise_for_api_error(response)
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise APIError(
            f"invalid JSON from {path}",
            status_code=response.status_code,
        ) from exc

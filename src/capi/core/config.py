"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Lee/escribe la config persistida (`~/.capi/config.yml`): endpoint, token y
  org/space targeteados, de donde sale el `ScopeContext`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from capi.core.domain.models import ScopeContext
from capi.core.domain.output_format import OutputFormat
from capi.core.domain.query import DEFAULT_PER_PAGE, MAX_PER_PAGE
from capi.core.errors import ConfigError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario.

    Reglas:
    - Si CAPI_HOME está definido, se usa tal cual.
    - Si no, `~/.capi` en todas las plataformas.
    """

    override = (os.environ.get("CAPI_HOME") or "").strip()
    if override:
        return Path(override)
    return Path.home() / ".capi"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def get_default_config_path() -> Path:
    return get_user_config_dir() / "config.yml"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPI_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api: str | None = Field(
        default=None,
        description="Endpoint del Cloud Controller (p.ej. https://api.example.com).",
    )
    token: str | None = Field(
        default=None,
        description="Bearer token para el Cloud Controller.",
    )
    uaa_endpoint: str | None = Field(
        default=None,
        description="Endpoint del UAA (identity management).",
    )
    uaa_token: str | None = Field(
        default=None,
        description="Bearer token para el UAA.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    skip_ssl_validation: bool = Field(
        default=False,
        description="Desactiva la verificación TLS (solo entornos de desarrollo).",
    )
    user_agent: str = Field(
        default="capi-cli/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )
    output: OutputFormat | None = Field(
        default=None,
        description="Formato de salida por defecto (table/json/yaml).",
    )
    per_page: int = Field(
        default=DEFAULT_PER_PAGE,
        ge=1,
        le=MAX_PER_PAGE,
        description="Resultados por página en los `list`.",
    )
    strict_resolution: bool = Field(
        default=False,
        description="Fallar con AmbiguousMatch si un nombre coincide con varios recursos.",
    )
    uaa_page_size: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Tamaño de página SCIM (`count`) para el UAA.",
    )
    uaa_max_pages: int = Field(
        default=100,
        ge=1,
        description="Límite de páginas SCIM recorridas con --all.",
    )
    config_path: Path | None = Field(
        default=None,
        description="Ruta al YAML persistido (por defecto ~/.capi/config.yml).",
    )

    def resolved_config_path(self) -> Path:
        return self.config_path or get_default_config_path()


class CliConfig(BaseModel):
    """Config persistida entre invocaciones (target, credenciales)."""

    api: str | None = None
    token: str | None = None
    uaa_endpoint: str | None = None
    uaa_token: str | None = None
    organization: str | None = None
    organization_guid: str | None = None
    space: str | None = None
    space_guid: str | None = None
    output: OutputFormat | None = None

    def scope(self) -> ScopeContext:
        return ScopeContext(
            space_guid=self.space_guid or None,
            organization_guid=self.organization_guid or None,
        )


def load_cli_config(path: Path) -> CliConfig:
    """Carga el YAML persistido. Si no existe, devuelve una config vacía."""

    if not path.exists():
        logger.debug(f"No config file at {path}; using empty configuration")
        return CliConfig()

    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc

    if raw is None:
        return CliConfig()
    if not isinstance(raw, dict):
        raise ConfigError(
            f"config file {path} must contain a mapping",
            hint="Delete the file or fix it by hand.",
        )

    try:
        return CliConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc


def save_cli_config(path: Path, updates: dict[str, Any]) -> Path:
    """Escribe/actualiza claves en el YAML persistido (merge, no reemplazo)."""

    current = load_cli_config(path).model_dump(mode="json")
    current.update(updates)
    data = {k: v for k, v in current.items() if v is not None}

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigError(f"cannot write config file {path}: {exc}") from exc

    logger.debug(f"Saved {sorted(updates)} to {path}")
    return path

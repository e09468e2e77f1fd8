"""Per-invocation wiring for CLI commands.

The root callback fills :data:`state` once from the global flags; commands
then open a :class:`CommandContext` that merges flags, environment
(``AppSettings``) and the persisted config, and builds clients, resolvers
and the query builder on demand.

Precedence for endpoint, token and output format:
flag > environment > persisted config > default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from capi.adapters.cache import MemoryCache
from capi.adapters.capi_client import CloudControllerClient
from capi.adapters.output_renderer import OutputRenderer
from capi.adapters.uaa_client import UAAClient
from capi.core.config import AppSettings, CliConfig, load_cli_config
from capi.core.domain.models import ScopeContext
from capi.core.domain.output_format import OutputFormat
from capi.core.domain.resource_kinds import ORGANIZATIONS, SPACES, ResourceKind, ScopeLevel
from capi.core.errors import ConfigError
from capi.core.services.query_builder import QueryBuilder
from capi.core.services.resolver import Resolver


@dataclass
class CliState:
    """Global flags, set once by the root callback and only read afterwards."""

    output: OutputFormat | None = None
    api: str | None = None
    token: str | None = None
    config_path: Path | None = None


state = CliState()

# Accumulation cache shared by every command run in this process.
list_cache: MemoryCache[str, list[Any]] = MemoryCache()


@dataclass
class CommandContext:
    settings: AppSettings
    config: CliConfig
    config_path: Path
    output: OutputFormat
    renderer: OutputRenderer
    api: str | None = None
    token: str | None = None
    _cc: CloudControllerClient | None = field(default=None, repr=False)
    _uaa: UAAClient | None = field(default=None, repr=False)

    @property
    def scope(self) -> ScopeContext:
        return self.config.scope()

    @property
    def cc(self) -> CloudControllerClient:
        if self._cc is None:
            if not self.api:
                raise ConfigError(
                    "no API endpoint configured",
                    hint="Pass --api, set CAPI_API or run `capi doctor setup`.",
                )
            self._cc = CloudControllerClient.from_settings(self.api, self.settings, self.token)
        return self._cc

    def uaa(self) -> UAAClient:
        if self._uaa is None:
            endpoint = self.settings.uaa_endpoint or self.config.uaa_endpoint
            if not endpoint:
                info = self.cc.info()
                endpoint = info.link("uaa") or info.link("login")
            if not endpoint:
                raise ConfigError(
                    "no UAA endpoint configured",
                    hint="Set CAPI_UAA_ENDPOINT or `uaa_endpoint` in the config file.",
                )
            token = self.settings.uaa_token or self.config.uaa_token or self.token
            self._uaa = UAAClient.from_settings(endpoint, self.settings, token)
        return self._uaa

    def resolver(self, kind: ResourceKind) -> Resolver[Any]:
        return Resolver.for_kind(self.cc.resources(kind), kind, strict=self.settings.strict_resolution)

    def query_builder(self) -> QueryBuilder:
        return QueryBuilder(
            {
                ScopeLevel.SPACE: self.resolver(SPACES),
                ScopeLevel.ORGANIZATION: self.resolver(ORGANIZATIONS),
            }
        )

    def close(self) -> None:
        if self._cc is not None:
            self._cc.close()
        if self._uaa is not None:
            self._uaa.close()

    def __enter__(self) -> "CommandContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_context(renderer: OutputRenderer | None = None) -> CommandContext:
    settings = AppSettings()
    config_path = state.config_path or settings.resolved_config_path()
    config = load_cli_config(config_path)

    output = state.output or settings.output or config.output or OutputFormat.default()
    return CommandContext(
        settings=settings,
        config=config,
        config_path=config_path,
        output=output,
        renderer=renderer or OutputRenderer(),
        api=state.api or settings.api or config.api,
        token=state.token or settings.token or config.token,
    )

"""End-to-end tests for the Typer CLI (cli/main.py).

The Cloud Controller and the UAA are replaced by a routing
``httpx.MockTransport``; config lives in the isolated ``CAPI_HOME``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Union

import httpx
import pytest
import yaml
from typer.testing import CliRunner

from capi import __version__
from capi.adapters.capi_client import CloudControllerClient
from capi.adapters.http_client import build_client
from capi.adapters.uaa_client import UAAClient
from capi.cli import exit_codes
from capi.cli.main import app, run
from capi.core.config import load_cli_config, save_cli_config
from capi.core.errors import ConfigError, NotFoundError, ScopeRequiredError

runner = CliRunner()

Responder = Union[dict[str, Any], Callable[[httpx.Request], httpx.Response]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakePlatform:
    """Routes ``(method, path)`` to canned JSON or a callable."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(
                404,
                json={"errors": [{"code": 10010, "title": "CF-ResourceNotFound", "detail": "Not found"}]},
            )
        if callable(responder):
            return responder(request)
        return httpx.Response(201 if request.method == "POST" else 200, json=responder)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


def _page(resources: list[dict[str, Any]], total_pages: int = 1, total_results: int | None = None) -> dict[str, Any]:
    return {
        "pagination": {
            "total_results": len(resources) if total_results is None else total_results,
            "total_pages": total_pages,
        },
        "resources": resources,
    }


@pytest.fixture()
def platform(monkeypatch: pytest.MonkeyPatch) -> FakePlatform:
    fake = FakePlatform()
    transport = httpx.MockTransport(fake)

    def _cc(cls, api, settings, token):  # noqa: ANN001
        return cls(build_client(api, settings, token=token, transport=transport))

    def _uaa(cls, endpoint, settings, token):  # noqa: ANN001
        return cls(build_client(endpoint, settings, token=token, transport=transport))

    monkeypatch.setattr(CloudControllerClient, "from_settings", classmethod(_cc))
    monkeypatch.setattr(UAAClient, "from_settings", classmethod(_uaa))
    return fake


@pytest.fixture()
def config_path(isolated_env: Path) -> Path:
    path = isolated_env / "config.yml"
    save_cli_config(
        path,
        {
            "api": "https://api.example.com",
            "token": "tok",
            "uaa_endpoint": "https://uaa.example.com",
            "organization": "acme",
            "organization_guid": "o-1",
            "space": "dev",
            "space_guid": "sp-1",
        },
    )
    return path


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_missing_api_is_a_config_error(self, platform: FakePlatform) -> None:
        result = runner.invoke(app, ["apps", "list"])

        assert isinstance(result.exception, ConfigError)
        assert platform.requests == []

    def test_api_flag_overrides_config(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/stacks", _page([]))

        result = runner.invoke(app, ["--api", "https://other.example.com", "-o", "json", "stacks", "list"])

        assert result.exit_code == 0, result.output
        assert platform.requests[0].url.host == "other.example.com"

    def test_output_from_config(self, platform: FakePlatform, config_path: Path) -> None:
        save_cli_config(config_path, {"output": "yaml"})
        platform.on("GET", "/v3/stacks", _page([{"guid": "st-1", "name": "cflinuxfs4"}]))

        result = runner.invoke(app, ["stacks", "list"])

        assert yaml.safe_load(result.stdout)[0]["name"] == "cflinuxfs4"


# ---------------------------------------------------------------------------
# list / get
# ---------------------------------------------------------------------------

class TestList:
    def test_targeted_space_and_default_page_size(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/apps", _page([{"guid": "a-1", "name": "web", "state": "STARTED"}]))

        result = runner.invoke(app, ["-o", "json", "apps", "list"])

        assert result.exit_code == 0, result.output
        assert [a["name"] for a in json.loads(result.stdout)] == ["web"]
        params = platform.calls("/v3/apps")[0].url.params
        assert params["space_guids"] == "sp-1"
        assert params["per_page"] == "50"
        assert "page" not in params

    def test_space_flag_is_resolved_within_targeted_org(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/spaces", _page([{"guid": "sp-9", "name": "staging"}]))
        platform.on("GET", "/v3/apps", _page([]))

        result = runner.invoke(app, ["-o", "json", "apps", "list", "--space", "staging", "--name", "web", "--name", "api"])

        assert result.exit_code == 0, result.output
        space_search = platform.calls("/v3/spaces")[0].url.params
        assert space_search["names"] == "staging"
        assert space_search["organization_guids"] == "o-1"
        app_params = platform.calls("/v3/apps")[0].url.params
        assert app_params["space_guids"] == "sp-9"
        assert app_params["names"] == "web,api"

    def test_table_footer_when_more_pages(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/stacks", _page([{"guid": "st-1", "name": "cflinuxfs4"}], total_pages=3, total_results=3))

        result = runner.invoke(app, ["stacks", "list", "--per-page", "1"])

        assert result.exit_code == 0, result.output
        assert "cflinuxfs4" in result.stdout
        assert "Showing page 1 of 3. Use --all to fetch all pages." in result.stdout
        assert len(platform.calls("/v3/stacks")) == 1

    def test_all_fetches_every_page(self, platform: FakePlatform, config_path: Path) -> None:
        def stacks(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params.get("page", "1"))
            return httpx.Response(200, json=_page([{"guid": f"st-{page}", "name": f"stack-{page}"}], total_pages=3))

        platform.on("GET", "/v3/stacks", stacks)

        result = runner.invoke(app, ["-o", "json", "stacks", "list", "--all", "--per-page", "1"])

        assert result.exit_code == 0, result.output
        assert [s["guid"] for s in json.loads(result.stdout)] == ["st-1", "st-2", "st-3"]
        assert len(platform.calls("/v3/stacks")) == 3

    def test_empty_table(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/service_instances", _page([]))

        result = runner.invoke(app, ["services", "list"])

        assert result.exit_code == 0, result.output
        assert "No service instances found" in result.stdout

    @pytest.mark.parametrize("flag", ["--host", "--name"])
    def test_routes_are_filtered_by_host(self, platform: FakePlatform, config_path: Path, flag: str) -> None:
        platform.on("GET", "/v3/routes", _page([]))

        result = runner.invoke(app, ["-o", "json", "routes", "list", flag, "myhost"])

        assert result.exit_code == 0, result.output
        params = platform.calls("/v3/routes")[0].url.params
        assert params["hosts"] == "myhost"
        assert "names" not in params

    def test_table_keeps_every_column_when_piped(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on(
            "GET",
            "/v3/apps",
            _page(
                [
                    {
                        "guid": "1b3f0c2e-5d4a-4e8b-9c71-2f6a8d0ea6b7",
                        "name": "my-web-application",
                        "state": "STARTED",
                        "created_at": "2024-01-02T00:00:00Z",
                        "updated_at": "2024-03-04T00:00:00Z",
                        "lifecycle": {"type": "buildpack", "data": {"buildpacks": ["ruby_buildpack"], "stack": "cflinuxfs4"}},
                    }
                ]
            ),
        )

        result = runner.invoke(app, ["apps", "list"])

        assert result.exit_code == 0, result.output
        for text in ("1b3f0c2e-5d4a-4e8b-9c71-2f6a8d0ea6b7", "STARTED", "ruby_buildpack", "cflinuxfs4", "2024-03-04"):
            assert text in result.stdout

    def test_per_page_out_of_range(self, config_path: Path) -> None:
        result = runner.invoke(app, ["stacks", "list", "--per-page", "0"])

        assert result.exit_code == 2


class TestGet:
    def test_by_name(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/apps", _page([{"guid": "a-1", "name": "web", "state": "STARTED"}]))

        result = runner.invoke(app, ["-o", "yaml", "apps", "get", "web"])

        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.stdout)["guid"] == "a-1"
        assert len(platform.calls("/v3/apps/web")) == 1

    def test_by_guid_skips_search(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/apps/a-1", {"guid": "a-1", "name": "web"})

        result = runner.invoke(app, ["-o", "json", "apps", "get", "a-1"])

        assert result.exit_code == 0, result.output
        assert platform.calls("/v3/apps") == []

    def test_route_by_url(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on(
            "GET",
            "/v3/routes",
            _page(
                [
                    {"guid": "r-1", "host": "myhost", "url": "myhost.other.com"},
                    {"guid": "r-2", "host": "myhost", "url": "myhost.example.com"},
                ]
            ),
        )

        result = runner.invoke(app, ["-o", "json", "routes", "get", "myhost.example.com"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["guid"] == "r-2"
        assert [r.url.path for r in platform.requests] == ["/v3/routes"]
        params = platform.requests[0].url.params
        assert params["hosts"] == "myhost"
        assert params["space_guids"] == "sp-1"
        assert "names" not in params

    def test_path_like_input_stays_in_the_collection(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/apps", _page([]))
        platform.on("GET", "/v3/organizations", _page([{"guid": "o-1", "name": "acme"}]))

        result = runner.invoke(app, ["apps", "get", "../organizations"])

        assert isinstance(result.exception, NotFoundError)
        assert [r.url.path for r in platform.requests] == ["/v3/apps"]
        assert platform.requests[0].url.params["names"] == "../organizations"

    def test_not_found(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/apps", _page([]))

        result = runner.invoke(app, ["apps", "get", "ghost"])

        assert isinstance(result.exception, NotFoundError)
        assert result.exception.name_or_id == "ghost"


# ---------------------------------------------------------------------------
# UAA
# ---------------------------------------------------------------------------

class TestIdentity:
    def test_users_single_page(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on(
            "GET",
            "/Users",
            {"resources": [{"id": "u-1", "userName": "admin"}], "startIndex": 1, "totalResults": 1},
        )

        result = runner.invoke(app, ["-o", "json", "users", "list", "--filter", 'userName eq "admin"'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["userName"] == "admin"
        request = platform.calls("/Users")[0]
        assert request.url.host == "uaa.example.com"
        assert request.url.params["count"] == "100"

    def test_groups_all_walks_offsets(self, platform: FakePlatform, config_path: Path) -> None:
        def groups(request: httpx.Request) -> httpx.Response:
            start = int(request.url.params["startIndex"])
            names = ["a", "b", "c"][start - 1 : start + 1]
            return httpx.Response(
                200,
                json={
                    "resources": [{"id": n, "displayName": n} for n in names],
                    "startIndex": start,
                    "totalResults": 3,
                },
            )

        platform.on("GET", "/Groups", groups)

        result = runner.invoke(app, ["-o", "json", "groups", "list", "--all", "--count", "2"])

        assert result.exit_code == 0, result.output
        assert [g["displayName"] for g in json.loads(result.stdout)] == ["a", "b", "c"]
        assert [r.url.params["startIndex"] for r in platform.calls("/Groups")] == ["1", "3"]

    def test_bad_sort_order(self, config_path: Path) -> None:
        result = runner.invoke(app, ["users", "list", "--sort-order", "up"])

        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Quotas
# ---------------------------------------------------------------------------

class TestQuotas:
    def test_org_quota_payload(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on(
            "POST",
            "/v3/organization_quotas",
            lambda r: httpx.Response(201, json={"guid": "q-1", **json.loads(r.content)}),
        )

        result = runner.invoke(
            app, ["-o", "json", "org-quotas", "create", "small", "--total-memory", "1024", "--instances", "5"]
        )

        assert result.exit_code == 0, result.output
        body = json.loads(platform.calls("/v3/organization_quotas")[0].content)
        assert body == {"name": "small", "apps": {"total_memory_in_mb": 1024, "total_instances": 5}}

    def test_space_quota_uses_targeted_org(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on(
            "POST",
            "/v3/space_quotas",
            lambda r: httpx.Response(201, json={"guid": "q-2", **json.loads(r.content)}),
        )

        result = runner.invoke(app, ["-o", "json", "space-quotas", "create", "tiny"])

        assert result.exit_code == 0, result.output
        body = json.loads(platform.calls("/v3/space_quotas")[0].content)
        assert body == {"name": "tiny", "relationships": {"organization": {"data": {"guid": "o-1"}}}}

    def test_space_quota_without_org(self, platform: FakePlatform, isolated_env: Path) -> None:
        save_cli_config(isolated_env / "config.yml", {"api": "https://api.example.com"})

        result = runner.invoke(app, ["space-quotas", "create", "tiny"])

        assert isinstance(result.exception, ScopeRequiredError)


# ---------------------------------------------------------------------------
# target
# ---------------------------------------------------------------------------

class TestTarget:
    def test_show(self, config_path: Path) -> None:
        result = runner.invoke(app, ["-o", "json", "target"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["space_guid"] == "sp-1"

    def test_switch_org_clears_space(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/organizations", _page([{"guid": "o-2", "name": "other"}]))

        result = runner.invoke(app, ["-o", "json", "target", "--org", "other"])

        assert result.exit_code == 0, result.output
        config = load_cli_config(config_path)
        assert (config.organization, config.organization_guid) == ("other", "o-2")
        assert config.space is None and config.space_guid is None

    def test_space_within_new_org(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/v3/organizations", _page([{"guid": "o-2", "name": "other"}]))
        platform.on(
            "GET",
            "/v3/spaces",
            _page(
                [
                    {
                        "guid": "sp-7",
                        "name": "prod",
                        "relationships": {"organization": {"data": {"guid": "o-2"}}},
                    }
                ]
            ),
        )

        result = runner.invoke(app, ["target", "--org", "other", "--space", "prod"])

        assert result.exit_code == 0, result.output
        assert platform.calls("/v3/spaces")[0].url.params["organization_guids"] == "o-2"
        config = load_cli_config(config_path)
        assert (config.organization_guid, config.space_guid, config.space) == ("o-2", "sp-7", "prod")


# ---------------------------------------------------------------------------
# doctor
# ---------------------------------------------------------------------------

class TestDoctor:
    def test_all_ok(self, platform: FakePlatform, config_path: Path) -> None:
        platform.on("GET", "/", {"links": {"cloud_controller_v3": {"href": "x", "meta": {"version": "3.150.0"}}}})

        result = runner.invoke(app, ["doctor", "run"])

        assert result.exit_code == exit_codes.SUCCESS, result.output
        assert "3.150.0" in result.stdout

    def test_missing_api_fails(self) -> None:
        result = runner.invoke(app, ["doctor", "run"])

        assert result.exit_code == exit_codes.GENERAL_ERROR

    def test_setup_saves_config(self, isolated_env: Path) -> None:
        result = runner.invoke(
            app, ["doctor", "setup"], input="https://api.example.com\nsecret\n\n"
        )

        assert result.exit_code == 0, result.output
        config = load_cli_config(isolated_env / "config.yml")
        assert (config.api, config.token, config.uaa_endpoint) == ("https://api.example.com", "secret", None)


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestRun:
    def test_known_error_exits_1_with_message(
        self,
        platform: FakePlatform,
        config_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        platform.on("GET", "/v3/apps", _page([]))
        monkeypatch.setattr(sys, "argv", ["capi", "apps", "get", "ghost"])

        with pytest.raises(SystemExit) as excinfo:
            run()

        assert excinfo.value.code == exit_codes.GENERAL_ERROR
        assert "application 'ghost' not found" in capsys.readouterr().err

    def test_hint_is_printed(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setattr(sys, "argv", ["capi", "apps", "list"])

        with pytest.raises(SystemExit) as excinfo:
            run()

        assert excinfo.value.code == exit_codes.GENERAL_ERROR
        assert "Hint:" in capsys.readouterr().err

    def test_success_exits_0(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setattr(sys, "argv", ["capi", "--version"])

        with pytest.raises(SystemExit) as excinfo:
            run()

        assert excinfo.value.code == exit_codes.SUCCESS

    def test_usage_error_exits_2(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["capi", "apps", "list", "--bogus"])

        with pytest.raises(SystemExit) as excinfo:
            run()

        assert excinfo.value.code == 2

    def test_keyboard_interrupt_exits_130(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _interrupt(*args: object, **kwargs: object) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr("capi.cli.resources.open_context", _interrupt)
        monkeypatch.setattr(sys, "argv", ["capi", "stacks", "list"])

        with pytest.raises(SystemExit) as excinfo:
            run()

        assert excinfo.value.code == exit_codes.KEYBOARD_INTERRUPT

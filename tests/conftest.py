"""Shared pytest fixtures and configuration for the capi test suite.

Guidelines
----------
* No network access in any test: HTTP goes through ``httpx.MockTransport``
  or the clients are replaced by ``MagicMock``.
* Every test runs with an isolated ``CAPI_HOME`` and working directory so
  no real ``~/.capi/config.yml`` or ``.env`` is read.
"""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Iterator

import pytest
from loguru import logger

from capi.cli import context
from capi.core.domain.models import PageEnvelope


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    for key in list(os.environ):
        if key.upper().startswith("CAPI_"):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "capi-home"
    monkeypatch.setenv("CAPI_HOME", str(home))
    monkeypatch.delenv("COLUMNS", raising=False)
    monkeypatch.chdir(tmp_path)
    logger.remove()

    for field in fields(context.CliState):
        setattr(context.state, field.name, field.default)
    context.list_cache._data.clear()
    yield home
    context.list_cache._data.clear()


def make_page(
    items: list[Any],
    *,
    page: int = 1,
    per_page: int = 50,
    total_pages: int = 1,
    total_results: int | None = None,
) -> PageEnvelope:
    return PageEnvelope(
        items=items,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        total_results=len(items) if total_results is None else total_results,
    )

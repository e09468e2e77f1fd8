"""Custom exception hierarchy for capi.

Every error that crosses a layer boundary inherits from :class:`CapiError`.
Raw ``httpx`` exceptions never leave the adapters layer: they are caught
and re-raised as a typed subclass defined here, so the CLI error boundary
can render a clean message.

Hierarchy
---------
CapiError
├── ConfigError
├── ScopeRequiredError
├── TransportError
├── APIError
│   ├── ResourceNotFoundAPIError
│   └── AuthError
├── NotFoundError
├── AmbiguousMatchError
├── PageFetchError
└── RenderError
"""

from __future__ import annotations

from typing import Sequence

from capi.core.domain.models import ResourceHandle

# Cloud Controller V3 error codes.
CF_CODE_NOT_AUTHENTICATED = 10002
CF_CODE_NOT_AUTHORIZED = 10003
CF_CODE_RESOURCE_NOT_FOUND = 10010


class CapiError(Exception):
    """Base exception for all capi errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration ---------------------------------------------------------

class ConfigError(CapiError):
    """Raised when the persisted configuration cannot be read or written."""


class ScopeRequiredError(CapiError):
    """Raised when a command needs a space/org and none was given or targeted."""


# --- Transport -------------------------------------------------------------

class TransportError(CapiError):
    """Raised when the request never produced an HTTP response."""


class APIError(CapiError):
    """Raised when the API answered with an error status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: int | None = None,
        title: str | None = None,
        detail: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.code = code
        self.title = title
        self.detail = detail


class ResourceNotFoundAPIError(APIError):
    """HTTP 404 / CF-ResourceNotFound. The only error that means "not an id"."""


class AuthError(APIError):
    """HTTP 401/403: missing, expired or insufficient credentials."""


# --- Resolution ------------------------------------------------------------

class NotFoundError(CapiError):
    """Raised when a name-or-GUID matches nothing in the active scope."""

    def __init__(self, name_or_id: str, *, kind: str = "resource") -> None:
        super().__init__(f"{kind} '{name_or_id}' not found")
        self.name_or_id = name_or_id
        self.kind = kind


class AmbiguousMatchError(CapiError):
    """Raised (strict mode only) when a name matches more than one resource."""

    def __init__(
        self,
        name: str,
        matches: Sequence[ResourceHandle],
        *,
        kind: str = "resource",
    ) -> None:
        listing = ", ".join(f"{m.display_name} ({m.id})" for m in matches)
        super().__init__(
            f"{kind} name '{name}' is ambiguous: {len(matches)} matches",
            hint=f"Use one of the GUIDs instead: {listing}",
        )
        self.name = name
        self.matches: list[ResourceHandle] = list(matches)
        self.kind = kind


# --- Pagination / rendering ------------------------------------------------

class PageFetchError(CapiError):
    """Raised when a page fails during multi-page accumulation."""

    def __init__(self, page: int, cause: Exception) -> None:
        super().__init__(f"failed to fetch page {page}: {cause}")
        self.page = page
        self.cause = cause


class RenderError(CapiError):
    """Raised when a result cannot be serialized or written to the output."""

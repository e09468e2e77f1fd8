"""App limits payload for organization and space quotas.

Both quota kinds share the same ``apps`` block, so a single table of
field setters replaces one builder type per quota kind.
"""

from __future__ import annotations

from typing import Any, Mapping

# flag name -> key in the ``apps`` block of the quota payload
APP_LIMIT_FIELDS: dict[str, str] = {
    "total_memory": "total_memory_in_mb",
    "instance_memory": "per_process_memory_in_mb",
    "instances": "total_instances",
    "app_tasks": "per_app_tasks",
    "log_rate_limit": "log_rate_limit_in_bytes_per_second",
}


def build_app_limits(values: Mapping[str, int | None]) -> dict[str, Any] | None:
    """Return the ``apps`` block for the flags the user actually set.

    ``None`` means "flag not given" and leaves the key out; if no flag was
    given at all the result is ``None`` so the block is omitted entirely.
    """
    unknown = set(values) - set(APP_LIMIT_FIELDS)
    if unknown:
        raise ValueError(f"unknown app limit field(s): {', '.join(sorted(unknown))}")

    apps = {
        APP_LIMIT_FIELDS[flag]: value
        for flag, value in values.items()
        if value is not None
    }
    return apps or None


def build_quota_payload(
    name: str,
    app_limits: dict[str, Any] | None,
    relationships: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name}
    if app_limits is not None:
        payload["apps"] = app_limits
    if relationships:
        payload["relationships"] = relationships
    return payload

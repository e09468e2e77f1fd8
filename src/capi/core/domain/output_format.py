"""Output format options for capi.

This module centralizes the rendering formats supported by every command.
Keeping it in the domain layer lets the CLI, the settings object and the
renderers share one definition without importing each other.
"""

from __future__ import annotations

from enum import Enum


class OutputFormat(str, Enum):
    """Supported output formats for command results."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def default(cls) -> "OutputFormat":
        """Return the format used when nothing was configured."""

        return cls.TABLE

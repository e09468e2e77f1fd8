"""Exit-code constants used by the CLI layer."""

from __future__ import annotations

SUCCESS: int = 0

GENERAL_ERROR: int = 1
"""A known CapiError was caught and its message was displayed."""

UNEXPECTED_ERROR: int = 2
"""Unhandled exception, or a usage error reported by the argument parser."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C (128 + SIGINT)."""

"""Configuración de logging (loguru).

stdout queda reservado para la salida renderizada (tabla/JSON/YAML), así que
todos los logs van a stderr.
"""

from __future__ import annotations

import sys

from loguru import logger

_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}"


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=_FORMAT,
        colorize=None,
    )

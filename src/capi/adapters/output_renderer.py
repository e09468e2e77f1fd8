"""Renderizado de resultados (JSON / YAML / tabla).

Por qué un único renderer:
- Todos los comandos comparten la misma máquina de tres ramas; lo único
  específico de cada recurso es la proyección de columnas (`TableSpec`).
- El formato llega como argumento explícito: el renderer no lee estado
  global, así que se testea con cualquier formato sin tocar el proceso.

Reglas:
- JSON: indentación estable de 2 espacios, newline final.
- YAML: estilo block por defecto de PyYAML, sin reordenar claves.
- Tabla: Rich; si la colección está vacía se imprime una frase
  ("No <recursos> found") en vez de una tabla vacía.
- Cualquier fallo de serialización o de escritura se convierte en
  `RenderError`; nunca se silencia.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TextIO

import yaml
from pydantic import BaseModel
from rich.console import Console, RenderableType
from rich.table import Table
from rich.text import Text

from capi.core.domain.output_format import OutputFormat
from capi.core.errors import RenderError

NOT_AVAILABLE = "N/A"

# Ancho de medida sin TTY: la tabla se imprime a su ancho natural.
_UNBOUNDED_WIDTH = 10_000


@dataclass(frozen=True)
class Column:
    header: str
    value: Callable[[Any], object]
    style: str | None = None
    no_wrap: bool = False


@dataclass(frozen=True)
class TableSpec:
    """Proyección de columnas de un tipo de recurso."""

    columns: Sequence[Column]
    empty_message: str = "No results found"
    title: str | None = None


def to_plain(value: Any) -> Any:
    """Convierte modelos Pydantic (y listas/dicts de ellos) a tipos JSON."""

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    return value


def format_cell(value: object) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or NOT_AVAILABLE
    return str(value)


def dump_json(value: Any) -> str:
    try:
        return json.dumps(to_plain(value), ensure_ascii=False, indent=2) + "\n"
    except (TypeError, ValueError) as exc:
        raise RenderError(f"encoding data to JSON: {exc}") from exc


def dump_yaml(value: Any) -> str:
    try:
        return yaml.safe_dump(
            to_plain(value),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=2,
        )
    except yaml.YAMLError as exc:
        raise RenderError(f"encoding data to YAML: {exc}") from exc


def build_list_table(items: Sequence[Any], spec: TableSpec) -> Table:
    table = Table(title=spec.title)
    for column in spec.columns:
        table.add_column(column.header, style=column.style, no_wrap=column.no_wrap, overflow="fold")
    for item in items:
        table.add_row(*(Text(format_cell(column.value(item))) for column in spec.columns))
    return table


def build_detail_table(item: Any, spec: TableSpec) -> Table:
    table = Table(title=spec.title)
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for column in spec.columns:
        table.add_row(column.header, Text(format_cell(column.value(item))))
    return table


class OutputRenderer:
    """Despacha un valor a uno de los tres renderers.

    `stream` se resuelve en cada llamada (por defecto `sys.stdout`), así los
    runners de test que reemplazan stdout capturan la salida.
    """

    def __init__(self, stream: TextIO | None = None, *, width: int | None = None) -> None:
        self._stream = stream
        self._width = width

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _console(self, renderable: RenderableType) -> Console:
        console = Console(file=self.stream, width=self._width, highlight=False, soft_wrap=False)
        if self._width is not None or console.is_terminal:
            return console
        # Salida redirigida: sin terminal que limite, no se recortan columnas.
        options = console.options.update_width(_UNBOUNDED_WIDTH)
        natural = console.measure(renderable, options=options).maximum
        if natural <= console.width:
            return console
        return Console(file=self.stream, width=natural, highlight=False, soft_wrap=False)

    def _write(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except OSError as exc:
            raise RenderError(f"writing output: {exc}") from exc

    def render(
        self,
        value: Any,
        fmt: OutputFormat,
        *,
        table: TableSpec | None = None,
        footer: str | None = None,
    ) -> None:
        if fmt is OutputFormat.JSON:
            self._write(dump_json(value))
            return
        if fmt is OutputFormat.YAML:
            self._write(dump_yaml(value))
            return
        self.render_table(value, table or TableSpec(columns=()), footer=footer)

    def render_table(self, value: Any, spec: TableSpec, *, footer: str | None = None) -> None:
        if isinstance(value, (list, tuple)):
            if not value:
                self._write(spec.empty_message + "\n")
                return
            renderable = build_list_table(value, spec)
        else:
            renderable = build_detail_table(value, spec)

        self.print_renderable(renderable, footer=footer)

    def print_renderable(self, renderable: RenderableType, *, footer: str | None = None) -> None:
        try:
            console = self._console(renderable)
            console.print(renderable)
            if footer:
                console.print(f"\n{footer}", markup=False)
        except OSError as exc:
            raise RenderError(f"writing table: {exc}") from exc

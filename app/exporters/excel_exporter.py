"""
Excel export of a workflow phase list, built with openpyxl.

Provides ``ExcelExporter`` — a stateful builder that constructs a styled
workbook in memory and returns its bytes for streaming via FastAPI — and
``export_fases_xlsx``, the one-call helper used by the workflow service.

Usage example::

    exporter = ExcelExporter(title="Mantenimiento Preventivo", filters={"Origen": "plantilla"})
    exporter.add_header()
    exporter.add_kpi_row({"Fases": 6, "Tiempo total": "4h 50min"})
    exporter.add_data_table(headers, rows)
    file_bytes = exporter.finalize()

Design notes
------------
- In-memory workbook (``BytesIO``); nothing is written to disk.
- Column widths are auto-sized from the longest value in each column
  (capped at 60 characters).
- Alternating row shading uses light-grey every other data row.
- The phase colour is shown as the fill of its own cell.
"""

from __future__ import annotations

import io
import re
from datetime import datetime, timezone
from typing import Any, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.engine.fase import Fase, calcular_tiempo_total, formatear_tiempo

# Design tokens (shared with the frontend palette)
_HEX_PRIMARY = "3B82F6"
_HEX_WHITE = "FFFFFF"
_HEX_TITLE_BG = "1E3A5F"
_HEX_LABEL_BG = "EFF6FF"
_HEX_LIGHT_GREY = "F3F4F6"
_HEX_BORDER = "CBD5E1"

_MAX_COL_WIDTH = 60
_MIN_COL_WIDTH = 8
_HEX_COLOR_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")

FASES_HEADERS: list[str] = [
    "Orden",
    "ID",
    "Fase",
    "Descripción",
    "Tiempo (min)",
    "Crítica",
    "Ejecutada",
    "Color",
]


def _thin_border() -> Border:
    side = Side(style="thin", color=_HEX_BORDER)
    return Border(left=side, right=side, top=side, bottom=side)


def _solid(hex_color: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=hex_color)


class ExcelExporter:
    """Stateful openpyxl workbook builder.

    Args:
        title: Title shown in the merged header row, e.g. ``"Servicio Express"``.
        filters: Label/value pairs shown under the title.
        sheet_name: Worksheet tab name (default ``"Fases"``).
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        sheet_name: str = "Fases",
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._workbook = Workbook()
        self._worksheet = self._workbook.active
        self._worksheet.title = sheet_name[:31]

        # openpyxl rows are 1-based
        self._current_row: int = 1
        self._num_cols: int = len(FASES_HEADERS)

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_header(self) -> "ExcelExporter":
        """Write the title row, a generation timestamp and one row per filter."""
        ws = self._worksheet
        ultima = get_column_letter(self._num_cols)

        ws.merge_cells(f"A{self._current_row}:{ultima}{self._current_row}")
        titulo = ws.cell(row=self._current_row, column=1, value=self._title)
        titulo.font = Font(bold=True, color=_HEX_WHITE, size=14, name="Calibri")
        titulo.fill = _solid(_HEX_TITLE_BG)
        titulo.alignment = Alignment(horizontal="center", vertical="center")
        ws.row_dimensions[self._current_row].height = 28
        self._current_row += 1

        gen_ts = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_cells(f"A{self._current_row}:{ultima}{self._current_row}")
        sub = ws.cell(row=self._current_row, column=1, value=f"Generado: {gen_ts}")
        sub.font = Font(italic=True, color="6B7280", size=9, name="Calibri")
        sub.alignment = Alignment(horizontal="center")
        self._current_row += 1

        for clave, valor in self._filters.items():
            etiqueta = ws.cell(row=self._current_row, column=1, value=clave)
            etiqueta.font = Font(bold=True, color=_HEX_TITLE_BG, size=10, name="Calibri")
            etiqueta.fill = _solid(_HEX_LABEL_BG)
            etiqueta.border = _thin_border()
            ws.cell(row=self._current_row, column=2, value=valor).border = _thin_border()
            self._current_row += 1

        # Blank separator row
        self._current_row += 1
        return self

    def add_kpi_row(self, kpis: dict[str, Any]) -> "ExcelExporter":
        """Write labels on one row and their values on the next."""
        ws = self._worksheet
        for col, (label, value) in enumerate(kpis.items(), start=1):
            celda = ws.cell(row=self._current_row, column=col, value=label)
            celda.font = Font(bold=True, size=9, color="6B7280", name="Calibri")
            valor = ws.cell(row=self._current_row + 1, column=col, value=value)
            valor.font = Font(bold=True, size=12, color=_HEX_PRIMARY, name="Calibri")
        self._current_row += 3
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        color_column: int | None = None,
    ) -> "ExcelExporter":
        """Write a styled header row followed by the data rows.

        Args:
            headers: Column titles.
            rows: Row values, same length as *headers*.
            color_column: 1-based column holding a hex colour; its cells are
                filled with that colour.
        """
        ws = self._worksheet
        borde = _thin_border()
        widths = [len(str(h)) for h in headers]

        for col, header in enumerate(headers, start=1):
            celda = ws.cell(row=self._current_row, column=col, value=header)
            celda.font = Font(bold=True, color=_HEX_WHITE, size=10, name="Calibri")
            celda.fill = _solid(_HEX_PRIMARY)
            celda.border = borde
            celda.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        self._current_row += 1

        for i, row in enumerate(rows):
            relleno = _solid(_HEX_LIGHT_GREY) if i % 2 else None
            for col, value in enumerate(row, start=1):
                celda = ws.cell(row=self._current_row, column=col, value=value)
                celda.border = borde
                if col == color_column and value and _HEX_COLOR_RE.match(str(value)):
                    celda.fill = _solid(str(value).lstrip("#").upper())
                elif relleno is not None:
                    celda.fill = relleno
                widths[col - 1] = max(widths[col - 1], len(str(value or "")))
            self._current_row += 1

        for col, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col)].width = min(
                max(width + 2, _MIN_COL_WIDTH), _MAX_COL_WIDTH
            )
        return self

    def finalize(self) -> bytes:
        """Serialise the workbook and return its bytes."""
        buffer = io.BytesIO()
        self._workbook.save(buffer)
        return buffer.getvalue()


def export_fases_xlsx(
    titulo: str,
    fases: Sequence[Fase],
    filtros: dict[str, str] | None = None,
) -> bytes:
    """Build the ``.xlsx`` of a phase list (one row per phase, in ``orden``)."""
    ordenadas = sorted(fases, key=lambda f: f.orden)
    rows = [
        [
            f.orden,
            f.id,
            f.nombre,
            f.descripcion,
            f.tiempo_estimado,
            "Sí" if f.es_critica else "No",
            "Sí" if f.ejecutada else "No",
            f.color or "",
        ]
        for f in ordenadas
    ]
    return (
        ExcelExporter(title=titulo, filters=filtros)
        .add_header()
        .add_kpi_row(
            {
                "Fases": len(ordenadas),
                "Tiempo total": formatear_tiempo(calcular_tiempo_total(ordenadas)),
                "Críticas": sum(1 for f in ordenadas if f.es_critica),
                "Ejecutadas": sum(1 for f in ordenadas if f.ejecutada),
            }
        )
        .add_data_table(FASES_HEADERS, rows, color_column=len(FASES_HEADERS))
        .finalize()
    )

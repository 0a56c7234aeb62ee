"""
Template writer
===============

Writes import templates (header labels plus one example row) and exports
parsed rows back to xlsx in the column order of a schema.

Date columns holding an ISO date are written as real date cells and number
columns as numeric cells, so a written file imports back to the same values.
"""

from __future__ import annotations

import re
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from sheetimport.ir import ColumnSchema, ColumnSpec
from sheetimport.logger import get_logger

logger = get_logger(__name__)

RE_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
RE_INTEGER = re.compile(r"^[+-]?\d+$")
RE_DECIMAL = re.compile(r"^[+-]?\d*\.\d+$")

DATE_NUMBER_FORMAT = "yyyy-mm-dd"
MAX_SHEET_TITLE = 31
MIN_COLUMN_WIDTH = 12


class ValueConverter:
    """Turn parsed string values into typed cell values."""

    @staticmethod
    def convert(value: Any, col: ColumnSpec) -> Any:
        if value is None:
            return ""
        if not isinstance(value, str):
            return value
        text = value.strip()
        if not text:
            return ""
        if col.kind == "date":
            parsed = ValueConverter._parse_date(text)
            return parsed if parsed is not None else value
        if col.kind == "number":
            if RE_INTEGER.match(text):
                return int(text)
            if RE_DECIMAL.match(text):
                return float(text)
        return value

    @staticmethod
    def _parse_date(text: str) -> Optional[date]:
        m = RE_ISO_DATE.match(text)
        if not m:
            return None
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None


def _new_sheet(schema: ColumnSchema, sheet_name: str):
    wb = Workbook()
    ws = wb.active
    ws.title = (sheet_name or "Sheet1")[:MAX_SHEET_TITLE]
    bold = Font(bold=True)
    for col_idx, col in enumerate(schema.columns, start=1):
        cell = ws.cell(row=1, column=col_idx, value=col.label)
        cell.font = bold
        ws.column_dimensions[get_column_letter(col_idx)].width = max(MIN_COLUMN_WIDTH, len(col.label) + 2)
    return wb, ws


def _write_row(ws, row_idx: int, schema: ColumnSchema, values: Mapping[str, Any]) -> None:
    for col_idx, col in enumerate(schema.columns, start=1):
        value = ValueConverter.convert(values.get(col.key), col)
        cell = ws.cell(row=row_idx, column=col_idx, value=value)
        if isinstance(value, date):
            cell.number_format = DATE_NUMBER_FORMAT


def _finish(wb: Workbook, path: Optional[Union[str, Path]]) -> bytes:
    buf = BytesIO()
    wb.save(buf)
    data = buf.getvalue()
    if path is not None:
        out = Path(path).expanduser()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
        logger.info("Wrote %s (%d bytes)", out, len(data))
    return data


def generate_template(
    schema: ColumnSchema,
    sheet_name: str = "Sheet1",
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Build an import template: bold header labels and one example row.

    Returns the xlsx bytes; also writes them to *path* when given.
    """
    wb, ws = _new_sheet(schema, sheet_name)
    _write_row(ws, 2, schema, {c.key: c.example for c in schema.columns})
    return _finish(wb, path)


def export_rows(
    rows: Sequence[Mapping[str, Any]],
    schema: ColumnSchema,
    sheet_name: str = "Sheet1",
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Write *rows* under the schema's header labels.

    Keys not declared in *schema* are ignored; missing or ``None`` values
    become empty cells.
    """
    wb, ws = _new_sheet(schema, sheet_name)
    for offset, row in enumerate(rows):
        _write_row(ws, offset + 2, schema, row)
    logger.debug("export_rows: %d row(s) x %d column(s)", len(rows), len(schema.columns))
    return _finish(wb, path)

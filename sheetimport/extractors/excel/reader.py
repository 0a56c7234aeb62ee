"""
ExcelReader: decode spreadsheet bytes into a raw cell grid.

Encapsulates:
- pandas engine selection (openpyxl for xlsx, xlrd for legacy xls)
- first-sheet-only reading with no header inference
- conversion of pandas/numpy values into plain Python cell values
"""

from __future__ import annotations

import io
import math
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from sheetimport.errors import UnreadableSpreadsheet
from sheetimport.extractors.excel.data_cleaner import DataCleaner
from sheetimport.ir import CellGrid
from sheetimport.logger import get_logger

logger = get_logger(__name__)

# Compound-file signature shared by legacy .xls workbooks.
_OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class ExcelReader:
    """Read the first sheet of a workbook into a ``CellGrid``."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_grid(self, data: bytes, filename: Optional[str] = None) -> CellGrid:
        """
        Decode *data* and return the first sheet as a list of rows.

        Empty cells become ``None`` and trailing empty cells are trimmed from
        each row, so rows can be of different lengths.
        """
        engine = self.pick_engine(data, filename)
        df = self.read_df(data, engine)
        grid = self.df_to_grid(df)
        logger.info(
            "Read %d row(s) from %s using %s",
            len(grid), filename or "<bytes>", engine,
        )
        return grid

    def read_headers(self, data: bytes, filename: Optional[str] = None) -> List[str]:
        """Return the trimmed first row of the first sheet (debug helper)."""
        grid = self.read_grid(data, filename)
        if not grid:
            return []
        return [DataCleaner.cell_to_str(h) for h in grid[0]]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def pick_engine(data: bytes, filename: Optional[str] = None) -> str:
        suffix = Path(filename).suffix.lower() if filename else ""
        if suffix == ".xls" or data[:8] == _OLE_MAGIC:
            return "xlrd"
        return "openpyxl"

    @staticmethod
    def read_df(data: bytes, engine: str) -> pd.DataFrame:
        if not data:
            raise UnreadableSpreadsheet("Spreadsheet is empty (0 bytes).")
        try:
            return pd.read_excel(
                io.BytesIO(data),
                sheet_name=0,
                header=None,
                engine=engine,
                keep_default_na=False,
            )
        except Exception as e:
            raise UnreadableSpreadsheet(f"Failed to read spreadsheet: {e}") from e

    @classmethod
    def df_to_grid(cls, df: pd.DataFrame) -> CellGrid:
        grid: CellGrid = []
        for raw_row in df.itertuples(index=False, name=None):
            row = [cls.to_python(v) for v in raw_row]
            while row and row[-1] is None:
                row.pop()
            grid.append(row)
        return grid

    @staticmethod
    def to_python(value: Any) -> Any:
        """Unwrap numpy scalars and pandas timestamps; map NaN/NaT/'' to ``None``."""
        if value is None or value is pd.NaT or value is pd.NA:
            return None
        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()
        if hasattr(value, "item") and not isinstance(value, (str, bytes, datetime)):
            value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
        if isinstance(value, str) and value == "":
            return None
        return value

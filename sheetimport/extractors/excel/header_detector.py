"""
HeaderDetector: identify the real header row and the first data row.

Vendor workbooks often open with merged "group" headers (``VESSEL DETAILS``,
``VESSEL DEPARTURE PLACE``) and stray metadata rows (a lone report number)
above the per-column header. The detector classifies the first rows
structurally instead of relying on field names.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from sheetimport.extractors.excel.config import (
    GROUP_HEADER_RE,
    PURE_DIGITS_RE,
    UPPER_ALPHA_RE,
    ExtractorConfig,
    DEFAULT_CONFIG,
)
from sheetimport.extractors.excel.data_cleaner import DataCleaner
from sheetimport.ir import CellGrid, HeaderLocation
from sheetimport.logger import get_logger

logger = get_logger(__name__)


class HeaderDetector:
    """
    Stateless detector that locates the header row of a cell grid.

    An :class:`ExtractorConfig` can be passed in to override default
    thresholds.
    """

    def __init__(self, cfg: ExtractorConfig = DEFAULT_CONFIG):
        self._cfg = cfg

    # -----------------------------------------------------------------
    # Row features
    # -----------------------------------------------------------------

    @staticmethod
    def row_values(row: Sequence[Any]) -> List[str]:
        return [DataCleaner.cell_to_str(c) for c in (row or [])]

    @classmethod
    def non_empty_count(cls, row: Sequence[Any]) -> int:
        return sum(1 for v in cls.row_values(row) if v)

    @staticmethod
    def grid_width(grid: CellGrid) -> int:
        return max((len(r) for r in grid), default=0)

    def is_group_cell(self, text: str) -> bool:
        """An all-upper-case title or a cell holding a structural keyword."""
        if not text:
            return False
        all_caps = (
            text.upper() == text
            and len(text) >= self._cfg.group_header_min_upper_len
            and UPPER_ALPHA_RE.search(text) is not None
        )
        return all_caps or GROUP_HEADER_RE.search(text) is not None

    def is_group_header_row(self, row: Sequence[Any], width: int) -> bool:
        """
        True for a merged section-title row.

        Dense rows are never group headers: merged titles leave most cells
        of the row empty, while a real header fills it.
        """
        values = self.row_values(row)
        filled = sum(1 for v in values if v)
        if not filled:
            return False
        if width and filled / width > self._cfg.group_header_max_fill_ratio:
            return False
        return any(self.is_group_cell(v) for v in values)

    def is_metadata_row(self, row: Sequence[Any]) -> bool:
        """
        True for rows that carry no tabular data.

        That is an empty row, or a lone numeric token (a report number such as
        ``1209``) with at most one other cell beside it.
        """
        values = [v for v in self.row_values(row) if v]
        if not values:
            return True
        if len(values) >= self._cfg.data_row_min_cells:
            return False
        return PURE_DIGITS_RE.match(values[0]) is not None and len(values) <= self._cfg.metadata_max_cells

    # -----------------------------------------------------------------
    # Header row selection
    # -----------------------------------------------------------------

    def select_header_row_index(self, grid: CellGrid) -> tuple[int, List[int]]:
        """
        Return ``(header_idx, group_rows)`` from the group-header rules.

        The first ``group_header_scan_rows`` rows are scanned from the top.
        Each group header, and each near-empty spacer directly below one,
        pushes the header down a row; the first other row ends the scan.
        With the default of two rows:

        - rows 0 and 1 are both group headers, or row 0 is and row 1 is a
          near-empty spacer -> header is row 2
        - only row 0 is a group header -> header is row 1
        - otherwise -> header is row 0
        """
        width = self.grid_width(grid)
        group_rows: List[int] = []
        for idx in range(min(self._cfg.group_header_scan_rows, len(grid))):
            row = grid[idx]
            is_spacer = bool(group_rows) and self.non_empty_count(row) <= self._cfg.group_header_spacer_max_cells
            if not (self.is_group_header_row(row, width) or is_spacer):
                break
            group_rows.append(idx)
        return len(group_rows), group_rows

    def locate(self, grid: CellGrid) -> HeaderLocation:
        """
        Find the header row and the first data row of *grid*.

        Metadata rows directly below the group headers are skipped before the
        header row is fixed, and again between the header and the first data
        row. ``data_start_index`` is ``None`` when nothing but metadata
        follows the header, or when the grid has fewer than two rows.
        """
        if len(grid) < 2:
            logger.debug("Grid has %d row(s); nothing to import", len(grid))
            return HeaderLocation(header_row_index=0, data_start_index=None)

        header_idx, group_rows = self.select_header_row_index(grid)
        while header_idx < len(grid) - 1 and self.is_metadata_row(grid[header_idx]):
            header_idx += 1

        data_start = header_idx + 1
        while data_start < len(grid):
            row = grid[data_start]
            count = self.non_empty_count(row)
            if count >= self._cfg.data_row_min_cells:
                break
            if self.is_metadata_row(row):
                data_start += 1
                continue
            break

        logger.debug(
            "Header row %d (group rows %s), data starts at %d of %d",
            header_idx, group_rows, data_start, len(grid),
        )
        if data_start >= len(grid):
            return HeaderLocation(
                header_row_index=header_idx,
                data_start_index=None,
                group_header_rows=group_rows,
            )
        return HeaderLocation(
            header_row_index=header_idx,
            data_start_index=data_start,
            group_header_rows=group_rows,
        )

    # -----------------------------------------------------------------
    # Header text
    # -----------------------------------------------------------------

    @staticmethod
    def header_texts(grid: CellGrid, header_idx: int) -> List[str]:
        """Header cells with line breaks flattened and whitespace collapsed."""
        if header_idx >= len(grid):
            return []
        return [DataCleaner.cell_to_str(h) for h in grid[header_idx]]

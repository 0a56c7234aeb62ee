"""
Exceptions raised by the import pipeline.

Only structural problems abort an import. Data-quality issues (missing
required values, degraded key or country resolution) are collected and
returned on :class:`sheetimport.ir.ImportResult` instead.
"""

from typing import List, Sequence


class StructuralMismatch(Exception):
    """
    One or more required columns are absent from the header row.

    Raised before any data row is parsed. ``str(exc)`` is the message shown to
    the operator as-is.
    """

    def __init__(
        self,
        missing: Sequence[str],
        found: Sequence[str],
        expected: Sequence[str],
    ):
        self.missing: List[str] = list(missing)
        self.found: List[str] = [h for h in found if h]
        self.expected: List[str] = list(expected)
        super().__init__(
            f"Missing required columns: {', '.join(self.missing)}. "
            f"Found columns: {', '.join(self.found)}. "
            f"Expected columns: {', '.join(self.expected)}"
        )


class UnreadableSpreadsheet(ValueError):
    """The spreadsheet codec could not decode the supplied bytes."""


class ProfileNotFoundError(FileNotFoundError):
    """No import profile YAML exists for the requested profile id."""

"""
DataCleaner: value normalisation utilities for the import pipeline.

Responsibilities:
- Cell-level coercion into the string forms stored on parsed rows
- Empty-cell detection
- Spreadsheet day-count <-> ISO date conversion
- Header-text normalisation (shared by the column mapper)
"""

from __future__ import annotations

import math
import numbers
from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Sequence

import pandas as pd

from sheetimport.extractors.excel.config import (
    LINE_BREAK_RE,
    MANDATORY_CLOSE_RE,
    MANDATORY_OPEN_RE,
    MANDATORY_PAREN_RE,
    MANDATORY_WORD_RE,
    NON_WORD_RE,
    SERIAL_DATE_EPOCH,
    WHITESPACE_RE,
    ExtractorConfig,
    DEFAULT_CONFIG,
)
from sheetimport.ir import ColumnKind, ColumnSchema, ParsedRow


class DataCleaner:
    """Normalises raw cell values and header text."""

    def __init__(self, cfg: ExtractorConfig = DEFAULT_CONFIG):
        self._cfg = cfg

    # ----- cell -> string ---------------------------------------------------

    @staticmethod
    def is_empty(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        if value is pd.NaT or value is pd.NA:
            return True
        return str(value).strip() == ""

    @staticmethod
    def clean_text(text: str) -> str:
        """Turn embedded line breaks into spaces, collapse whitespace, trim."""
        return WHITESPACE_RE.sub(" ", LINE_BREAK_RE.sub(" ", text)).strip()

    @staticmethod
    def format_number(value: Any) -> str:
        """Render a number as a plain decimal string (``9456147``, ``12.5``)."""
        if isinstance(value, numbers.Integral):
            return str(int(value))
        number = float(value)
        if number.is_integer():
            return str(int(number))
        return repr(number)

    @classmethod
    def cell_to_str(cls, value: Any) -> str:
        """Convert an arbitrary cell value to a clean string."""
        return cls.coerce_value(value, "text")

    @classmethod
    def coerce_value(
        cls,
        value: Any,
        kind: ColumnKind = "text",
        cfg: ExtractorConfig = DEFAULT_CONFIG,
    ) -> str:
        """
        Coerce one raw cell into its parsed-row string form.

        - null / NaN -> ``""``
        - number in a ``date`` column, strictly between the configured
          day-count bounds -> ISO calendar date
        - other number -> decimal string
        - native date / datetime -> ISO calendar date
        - string -> line breaks to spaces, whitespace collapsed, trimmed
        """
        if cls.is_empty(value):
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, numbers.Real):
            if kind == "date" and cfg.serial_date_min < value < cfg.serial_date_max:
                return cls.decode_serial_date(value)
            return cls.format_number(value)
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, str):
            return cls.clean_text(value)
        # Rich-text objects from openpyxl may expose .plain or .text
        plain_attr = getattr(value, "plain", None)
        if isinstance(plain_attr, str):
            return cls.clean_text(plain_attr)
        text_attr = getattr(value, "text", None)
        if isinstance(text_attr, str):
            return cls.clean_text(text_attr)
        return cls.clean_text(str(value))

    def coerce_row(
        self,
        row: Sequence[Any],
        bindings: Mapping[str, int],
        schema: ColumnSchema,
    ) -> ParsedRow:
        """
        Build a parsed row holding every schema key.

        Unbound columns and positions past the end of a short row yield ``""``.
        """
        parsed: Dict[str, str] = {}
        for col in schema.columns:
            idx = bindings.get(col.key)
            if idx is None or idx >= len(row):
                parsed[col.key] = ""
                continue
            parsed[col.key] = self.coerce_value(row[idx], col.kind, self._cfg)
        return parsed

    @staticmethod
    def is_blank_row(parsed: Mapping[str, str]) -> bool:
        """True when every coerced field is empty (a trailing blank row)."""
        return all(v == "" for v in parsed.values())

    # ----- day-count dates ----------------------------------------------------

    @staticmethod
    def decode_serial_date(serial: float) -> str:
        """Decode a spreadsheet day count into an ISO date, dropping any time part."""
        return (SERIAL_DATE_EPOCH + timedelta(days=math.floor(serial))).isoformat()

    @staticmethod
    def encode_serial_date(value: Any) -> int:
        """Inverse of :meth:`decode_serial_date` for ISO strings and dates."""
        if isinstance(value, datetime):
            day = value.date()
        elif isinstance(value, date):
            day = value
        else:
            day = date.fromisoformat(str(value).strip())
        return (day - SERIAL_DATE_EPOCH).days

    # ----- header text normalisation ---------------------------------------

    @staticmethod
    def normalize_header(text: Any) -> str:
        """
        Collapse header text into the form used for column matching.

        Line breaks become spaces, the text is lower-cased, any
        "(Mandatory ...)" phrase or bare "mandatory" is dropped, punctuation
        is removed and whitespace collapsed. Applying it twice changes nothing.
        """
        if text is None:
            return ""
        raw = LINE_BREAK_RE.sub(" ", str(text)).lower()
        raw = MANDATORY_PAREN_RE.sub(" ", raw)
        raw = MANDATORY_OPEN_RE.sub(" ", raw)
        raw = MANDATORY_CLOSE_RE.sub(" ", raw)
        raw = NON_WORD_RE.sub("", raw)
        raw = MANDATORY_WORD_RE.sub(" ", raw)
        return WHITESPACE_RE.sub(" ", raw).strip()

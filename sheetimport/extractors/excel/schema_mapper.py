"""
SchemaMapper: bind declared columns to header-row positions.

Translates header cell text into column keys of a :class:`ColumnSchema`
using, in order of preference:
1. Exact (case-insensitive) label match
2. Normalised-exact match (``"Departure terminal (Mandatory)"`` equals
   ``"Departure Terminal"``)
3. Bidirectional substring match on the normalised forms; a contained text
   shorter than ``header_substring_min_len`` must stand as a whole word
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from sheetimport.extractors.excel.config import DEFAULT_CONFIG, ExtractorConfig
from sheetimport.extractors.excel.data_cleaner import DataCleaner
from sheetimport.errors import StructuralMismatch
from sheetimport.ir import ColumnSchema, ColumnSpec
from sheetimport.logger import get_logger

logger = get_logger(__name__)


class SchemaMapper:
    """
    Map header cells to schema columns and enforce the required-column gate.

    Typical call sequence inside the import pipeline::

        mapper = SchemaMapper()
        bindings = mapper.bind(headers, schema)
        mapper.check_required(bindings, headers, schema)   # may raise
    """

    def __init__(self, cfg: ExtractorConfig = DEFAULT_CONFIG):
        self.cfg = cfg

    # ------------------------------------------------------------------
    # Matching predicates
    # ------------------------------------------------------------------

    @staticmethod
    def exact_match(header: str, label: str) -> bool:
        if not header:
            return False
        if header.lower() == label.lower():
            return True
        return DataCleaner.normalize_header(header) == DataCleaner.normalize_header(label)

    @staticmethod
    def _contains(outer: str, inner: str, min_len: int) -> bool:
        # Short labels only match as whole words, so "eta" stays out of "details".
        if len(inner) >= min_len:
            return inner in outer
        return re.search(rf"(?<!\w){re.escape(inner)}(?!\w)", outer) is not None

    @classmethod
    def partial_match(
        cls,
        header: str,
        label: str,
        min_len: int = DEFAULT_CONFIG.header_substring_min_len,
    ) -> bool:
        """Either normalised text contains the other ("Vessel Names" holds "Vessel Name")."""
        nh = DataCleaner.normalize_header(header)
        nl = DataCleaner.normalize_header(label)
        if not nh or not nl:
            return False
        return nh == nl or cls._contains(nh, nl, min_len) or cls._contains(nl, nh, min_len)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def find_index(
        self,
        col: ColumnSpec,
        headers: Sequence[str],
        claimed: Optional[set] = None,
        partial: bool = False,
    ) -> Optional[int]:
        """
        Return the first header position matching *col*.

        Exact matches prefer unclaimed positions but may share one already
        bound to another column. Substring matches only consider unclaimed
        positions.
        """
        claimed = claimed or set()
        if partial:
            min_len = self.cfg.header_substring_min_len
            hits = [i for i, h in enumerate(headers) if self.partial_match(h, col.label, min_len)]
        else:
            hits = [i for i, h in enumerate(headers) if self.exact_match(h, col.label)]
        for i in hits:
            if i not in claimed:
                return i
        if hits and not partial:
            return hits[0]
        return None

    def bind(self, headers: Sequence[str], schema: ColumnSchema) -> Dict[str, int]:
        """
        Return ``{column_key: header_index}`` for every column that binds.

        Exact and normalised-exact matches are resolved for all columns
        before any substring match, so ``"Port"`` cannot steal the
        ``"Departure Port"`` header from a column that names it exactly.
        """
        bindings: Dict[str, int] = {}
        claimed: set = set()
        for col in schema.columns:
            idx = self.find_index(col, headers, claimed)
            if idx is not None:
                bindings[col.key] = idx
                claimed.add(idx)
        for col in schema.columns:
            if col.key in bindings:
                continue
            idx = self.find_index(col, headers, claimed, partial=True)
            if idx is not None:
                bindings[col.key] = idx
                claimed.add(idx)
                logger.debug("Column %r bound by substring to header %r", col.key, headers[idx])
        return bindings

    # ------------------------------------------------------------------
    # Required-column gate
    # ------------------------------------------------------------------

    @staticmethod
    def missing_required(bindings: Dict[str, int], schema: ColumnSchema) -> List[str]:
        return [c.label for c in schema.required_columns if c.key not in bindings]

    def check_required(
        self,
        bindings: Dict[str, int],
        headers: Sequence[str],
        schema: ColumnSchema,
    ) -> None:
        """Raise :class:`StructuralMismatch` when a required column did not bind."""
        missing = self.missing_required(bindings, schema)
        if missing:
            logger.warning("Required columns missing from header row: %s", missing)
            raise StructuralMismatch(missing=missing, found=list(headers), expected=schema.labels)

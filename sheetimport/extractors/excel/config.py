"""
Centralised configuration for the spreadsheet import pipeline.

All magic numbers, regex patterns, keyword lists, and tunable thresholds
live here so that the rest of the code can stay free of hard-coded values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Tuple


# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (shared across modules)
# ---------------------------------------------------------------------------

LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
WHITESPACE_RE = re.compile(r"\s+")
PURE_DIGITS_RE = re.compile(r"^\d+$")
UPPER_ALPHA_RE = re.compile(r"[A-Z]")

# "(Mandatory)", "(Mandatory for exports)", unbalanced halves and bare "mandatory"
MANDATORY_PAREN_RE = re.compile(r"\s*\(\s*mandatory[^)]*\)\s*", re.IGNORECASE)
MANDATORY_OPEN_RE = re.compile(r"\s*\(\s*mandatory\s*", re.IGNORECASE)
MANDATORY_CLOSE_RE = re.compile(r"\s*mandatory\s*\)\s*", re.IGNORECASE)
MANDATORY_WORD_RE = re.compile(r"\s*\bmandatory\b\s*", re.IGNORECASE)
NON_WORD_RE = re.compile(r"[^\w\s]")


# ---------------------------------------------------------------------------
# Keyword constants
# ---------------------------------------------------------------------------

# Words that mark a merged section title above the real header row.
GROUP_HEADER_KEYWORDS: Tuple[str, ...] = (
    "details",
    "place",
    "destination",
    "departure",
    "vessel",
    "operation",
)

GROUP_HEADER_RE = re.compile(
    "|".join(re.escape(k) for k in GROUP_HEADER_KEYWORDS), re.IGNORECASE
)

# Day 0 of the spreadsheet date system. Using 1899-12-30 rather than
# 1900-01-01 keeps the 1900 leap-year bug: serial 60 is the phantom
# 1900-02-29, so serials from 61 on land on the right calendar day.
SERIAL_DATE_EPOCH = date(1899, 12, 30)


# ---------------------------------------------------------------------------
# ExtractorConfig - tunable thresholds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractorConfig:
    """Immutable bag of tunable thresholds used throughout the import."""

    # Group header detection
    group_header_scan_rows: int = 2
    group_header_min_upper_len: int = 4
    # Rows denser than this share of the grid width are real headers.
    group_header_max_fill_ratio: float = 0.6
    # A row after a group header with this many cells or fewer is a spacer.
    group_header_spacer_max_cells: int = 1

    # Metadata / data-start detection
    data_row_min_cells: int = 3
    metadata_max_cells: int = 2

    # Header binding: contained texts shorter than this must be whole words
    header_substring_min_len: int = 4

    # Day-count decoding for date columns (exclusive bounds)
    serial_date_min: float = 1
    serial_date_max: float = 1_000_000


# Singleton default config
DEFAULT_CONFIG = ExtractorConfig()

"""
Upsert collaborator interface
=============================

The persistence side of an import is a black box that accepts a batch of
rows and reports how many were inserted and how many updated. Rows are told
apart by their ``record_key`` (or, for profiles without one, the full row).

``InMemoryUpsertService`` keeps rows in a dict and backs dry runs and tests.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from sheetimport.ir import ImportResult, ParsedRow, UpsertResult
from sheetimport.logger import get_logger

logger = get_logger(__name__)

RECORD_KEY_FIELD = "record_key"


def build_upsert_payload(result: ImportResult, internal_keys: Iterable[str] = ()) -> List[ParsedRow]:
    """Copy the parsed rows without the import-only key components."""
    drop = set(internal_keys)
    return [{k: v for k, v in row.items() if k not in drop} for row in result.rows]


class UpsertService(ABC):
    """Insert-or-update a batch of rows."""

    @abstractmethod
    def upsert(self, rows: Sequence[Mapping[str, str]]) -> UpsertResult:
        raise NotImplementedError


class InMemoryUpsertService(UpsertService):
    """Dict-backed store keyed by record key."""

    def __init__(self, key_field: str = RECORD_KEY_FIELD):
        self.key_field = key_field
        self.records: Dict[str, Dict[str, str]] = {}

    def natural_key(self, row: Mapping[str, str]) -> str:
        key = row.get(self.key_field)
        if key:
            return str(key)
        return json.dumps(dict(row), sort_keys=True, ensure_ascii=False)

    def upsert(self, rows: Sequence[Mapping[str, str]]) -> UpsertResult:
        inserted = updated = 0
        for row in rows:
            key = self.natural_key(row)
            if key in self.records:
                updated += 1
            else:
                inserted += 1
            self.records[key] = dict(row)
        logger.info("upsert: %d row(s), %d inserted, %d updated", len(rows), inserted, updated)
        return UpsertResult(total=len(rows), inserted=inserted, updated=updated)

    def get(self, key: str) -> Optional[Dict[str, str]]:
        return self.records.get(key)

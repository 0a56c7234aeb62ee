"""
Record keys
===========

Derives the natural identity the upsert service uses to tell an insert from
an update. Tiers, first viable wins (every component trimmed and non-empty):

  1. ``{imo}|{operation_commenced}|{commodity_description}``
  2. ``{vessel_name}|{operation_commenced}|{commodity_description}``
  3. ``auto|{epoch_ms}|{random}``; unique, but a re-import of the same row
     will not find it again
"""

from __future__ import annotations

import time
import uuid
from typing import Callable, Mapping, Optional, Sequence

from sheetimport.config import get_settings
from sheetimport.ir import RecordKey
from sheetimport.logger import get_logger

logger = get_logger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _random_suffix() -> str:
    return uuid.uuid4().hex[:10]


class RecordKeyer:
    """Build record keys from configurable field names."""

    def __init__(
        self,
        id_field: str = "imo",
        name_field: str = "vessel_name",
        date_field: str = "operation_commenced",
        commodity_field: str = "commodity_description",
        separator: Optional[str] = None,
        clock: Callable[[], int] = _epoch_ms,
        suffix_factory: Callable[[], str] = _random_suffix,
    ):
        self.id_field = id_field
        self.name_field = name_field
        self.date_field = date_field
        self.commodity_field = commodity_field
        self.separator = separator or get_settings().RECORD_KEY_SEPARATOR
        self._clock = clock
        self._suffix_factory = suffix_factory

    @staticmethod
    def _parts(row: Mapping[str, str], fields: Sequence[str]) -> Optional[list]:
        parts = [str(row.get(f) or "").strip() for f in fields]
        if all(parts):
            return parts
        return None

    def derive(self, row: Mapping[str, str]) -> RecordKey:
        tail = (self.date_field, self.commodity_field)

        parts = self._parts(row, (self.id_field,) + tail)
        if parts:
            return RecordKey(value=self.separator.join(parts), tier=1)

        parts = self._parts(row, (self.name_field,) + tail)
        if parts:
            return RecordKey(value=self.separator.join(parts), tier=2)

        value = self.separator.join(["auto", str(self._clock()), self._suffix_factory()])
        logger.warning(
            "Row lacks %s/%s + %s + %s; using non-idempotent key %s",
            self.id_field, self.name_field, self.date_field, self.commodity_field, value,
        )
        return RecordKey(value=value, tier=3)

"""
Intermediate representation
===========================

Core data structures passed between the import stages: column schemas,
parsed rows, validation errors, warnings and the final import result.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ColumnKind = Literal["text", "date", "number"]

# A parsed row maps every schema key to its coerced value; "" means undefined.
ParsedRow = Dict[str, str]

# Raw two-dimensional grid of cell values as read from the first sheet.
CellGrid = List[List[Any]]

WarningCode = Literal[
    "degraded_record_key",
    "degraded_country_resolution",
    "degraded_location",
]


class ColumnSpec(BaseModel):
    """
    One declared column of an import type.

    Attributes:
        key: field name in the parsed row
        label: header text expected in the spreadsheet
        example: value written to the example row of generated templates
        required: whether an empty value is a validation error
        kind: ``date`` columns decode spreadsheet day counts into ISO dates
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    example: str = ""
    required: bool = False
    kind: ColumnKind = "text"

    @field_validator("key", "label")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ColumnSchema(BaseModel):
    """Ordered, immutable list of column specs with unique keys."""

    model_config = ConfigDict(frozen=True)

    columns: List[ColumnSpec]

    @model_validator(mode="after")
    def _unique_keys(self) -> "ColumnSchema":
        if not self.columns:
            raise ValueError("a column schema needs at least one column")
        seen = set()
        dupes = []
        for col in self.columns:
            if col.key in seen:
                dupes.append(col.key)
            seen.add(col.key)
        if dupes:
            raise ValueError(f"duplicate column keys: {', '.join(dupes)}")
        return self

    @property
    def keys(self) -> List[str]:
        return [c.key for c in self.columns]

    @property
    def labels(self) -> List[str]:
        return [c.label for c in self.columns]

    @property
    def required_columns(self) -> List[ColumnSpec]:
        return [c for c in self.columns if c.required]

    def get(self, key: str) -> Optional[ColumnSpec]:
        for col in self.columns:
            if col.key == key:
                return col
        return None


class FieldValidationError(BaseModel):
    """A required field left empty in one parsed row."""

    row_index: int
    column_key: str
    column_label: str
    message: str


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[FieldValidationError] = Field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]


class CommodityTaxon(str, Enum):
    """Canonical commodity vocabulary used by the port dashboards."""

    WHEAT = "WHEAT"
    CORN = "CORN"
    BARLEY = "BARLEY"
    RPS = "RPS"
    RPS_MEAL = "RPS_MEAL"
    RPS_OIL = "RPS_OIL"
    SFS = "SFS"
    SFS_MEAL = "SFS_MEAL"
    SFS_OIL = "SFS_OIL"


class ResolvedCountry(BaseModel):
    """
    Outcome of a country lookup.

    ``tier`` is the 1-based lookup tier that produced the code; tier 7 is the
    two-letter prefix fallback and is never verified against the corpus.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    tier: int

    @property
    def degraded(self) -> bool:
        return self.tier == 7


class RecordKey(BaseModel):
    """Natural identity of a row; tier 3 is the random, non-idempotent fallback."""

    model_config = ConfigDict(frozen=True)

    value: str
    tier: int

    @property
    def degraded(self) -> bool:
        return self.tier == 3


class ImportWarning(BaseModel):
    """Non-fatal data-quality finding attached to an import result."""

    code: WarningCode
    row_index: int
    message: str


class HeaderLocation(BaseModel):
    """
    Where the real header row and the first data row sit in a grid.

    ``data_start_index`` is ``None`` when the grid has no data rows.
    """

    header_row_index: int
    data_start_index: Optional[int] = None
    group_header_rows: List[int] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.data_start_index is not None


class ImportResult(BaseModel):
    """Everything one import run hands back to its caller."""

    profile_id: Optional[str] = None
    rows: List[ParsedRow] = Field(default_factory=list)
    validation: ValidationResult = Field(default_factory=lambda: ValidationResult(is_valid=True))
    warnings: List[ImportWarning] = Field(default_factory=list)
    header_row_index: Optional[int] = None
    data_start_index: Optional[int] = None
    column_bindings: Dict[str, int] = Field(default_factory=dict)
    found_headers: List[str] = Field(default_factory=list)

    def warnings_of(self, code: WarningCode) -> List[ImportWarning]:
        return [w for w in self.warnings if w.code == code]


class UpsertResult(BaseModel):
    total: int
    inserted: int
    updated: int

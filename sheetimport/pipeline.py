"""
Pipeline: thin orchestrator that composes the import stages.

parse_grid          – CellGrid + ColumnSchema → ImportResult
enrich_vessel_rows  – adds location, commodity group and record key to vessel rows
import_grid         – CellGrid + ImportProfile → enriched ImportResult
run_import          – file bytes + profile → ImportResult

Stages run strictly in sequence on one in-memory grid:
  HeaderDetector → SchemaMapper (required-column gate) → DataCleaner →
  validate_rows → optional enrichment

The only exception raised for a data problem is ``StructuralMismatch``;
per-row validation errors and degraded-tier warnings are returned on the
result.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from sheetimport.extractors.excel import DEFAULT_CONFIG, DataCleaner, ExcelReader, ExtractorConfig, HeaderDetector, SchemaMapper
from sheetimport.ir import CellGrid, ColumnSchema, ImportResult, ImportWarning, ParsedRow, ValidationResult
from sheetimport.logger import get_logger
from sheetimport.mapping.commodities import normalize_commodity
from sheetimport.mapping.countries import CountryResolver, get_country_resolver
from sheetimport.mapping.location import compose_location
from sheetimport.mapping.record_key import RecordKeyer
from sheetimport.mapping.validator import validate_rows
from sheetimport.profile_loader import ImportProfile, load_profile

logger = get_logger(__name__)

# Keys added to vessel rows by enrichment.
DEPARTURE_LOCATION_KEY = "departure_location"
DESTINATION_COUNTRY_CODE_KEY = "destination_country_code"
RECORD_KEY_KEY = "record_key"


# ---------------------------------------------------------------------------
# Grid parsing
# ---------------------------------------------------------------------------

def parse_grid(
    grid: CellGrid,
    schema: ColumnSchema,
    cfg: ExtractorConfig = DEFAULT_CONFIG,
    profile_id: Optional[str] = None,
) -> ImportResult:
    """
    Turn a raw grid into validated rows.

    Steps:
      1. Locate header and first data row
      2. Bind schema columns to header positions; raise ``StructuralMismatch``
         when a required column is absent
      3. Coerce every data row, dropping rows that come out entirely blank
      4. Validate required fields across the whole batch

    A grid with no data rows returns an empty, valid result without running
    the required-column gate.
    """
    detector = HeaderDetector(cfg)
    location = detector.locate(grid)
    if not location.has_data:
        logger.info("No data rows found below header row %d", location.header_row_index)
        return ImportResult(
            profile_id=profile_id,
            header_row_index=location.header_row_index,
            validation=ValidationResult(is_valid=True),
        )

    headers = detector.header_texts(grid, location.header_row_index)
    mapper = SchemaMapper(cfg)
    bindings = mapper.bind(headers, schema)
    mapper.check_required(bindings, headers, schema)

    cleaner = DataCleaner(cfg)
    rows: List[ParsedRow] = []
    for raw in grid[location.data_start_index:]:
        parsed = cleaner.coerce_row(raw, bindings, schema)
        if cleaner.is_blank_row(parsed):
            continue
        rows.append(parsed)

    validation = validate_rows(rows, schema)
    logger.debug("Bound %d of %d columns: %s", len(bindings), len(schema.columns), bindings)
    return ImportResult(
        profile_id=profile_id,
        rows=rows,
        validation=validation,
        header_row_index=location.header_row_index,
        data_start_index=location.data_start_index,
        column_bindings=bindings,
        found_headers=[h for h in headers if h],
    )


# ---------------------------------------------------------------------------
# Vessel enrichment
# ---------------------------------------------------------------------------

def enrich_vessel_row(
    row: ParsedRow,
    row_index: int,
    resolver: CountryResolver,
    keyer: RecordKeyer,
) -> List[ImportWarning]:
    """
    Add derived vessel fields to *row* in place and return its warnings.

    - ``departure_location`` from departure country and port
    - ``destination_country_code`` when a destination country is given
    - ``commodity_group`` from the commodity description when left blank
    - ``record_key`` from IMO / vessel name, commencement date and commodity
    """
    warnings: List[ImportWarning] = []
    n = row_index + 1

    loc = compose_location(
        row.get("departure_country"),
        row.get("departure_port"),
        existing=row.get(DEPARTURE_LOCATION_KEY),
        resolver=resolver,
    )
    row[DEPARTURE_LOCATION_KEY] = loc.value
    if loc.country_degraded:
        warnings.append(ImportWarning(
            code="degraded_country_resolution",
            row_index=row_index,
            message=f"Row {n}: departure country {row.get('departure_country')!r} resolved to unverified code {loc.country_code!r}",
        ))
    elif loc.needs_review:
        warnings.append(ImportWarning(
            code="degraded_location",
            row_index=row_index,
            message=f"Row {n}: departure location {loc.value!r} has no country code",
        ))

    destination = (row.get("destination_country") or "").strip()
    if destination:
        resolved = resolver.resolve(destination)
        row[DESTINATION_COUNTRY_CODE_KEY] = resolved.code
        if resolved.degraded:
            warnings.append(ImportWarning(
                code="degraded_country_resolution",
                row_index=row_index,
                message=f"Row {n}: destination country {destination!r} resolved to unverified code {resolved.code!r}",
            ))
    else:
        row[DESTINATION_COUNTRY_CODE_KEY] = ""

    if not (row.get("commodity_group") or "").strip():
        row["commodity_group"] = normalize_commodity(row.get("commodity_description"))

    key = keyer.derive(row)
    row[RECORD_KEY_KEY] = key.value
    if key.degraded:
        warnings.append(ImportWarning(
            code="degraded_record_key",
            row_index=row_index,
            message=f"Row {n}: no vessel identity, date and commodity; key {key.value!r} will not match on re-import",
        ))
    return warnings


def enrich_vessel_rows(
    rows: Sequence[ParsedRow],
    resolver: Optional[CountryResolver] = None,
    keyer: Optional[RecordKeyer] = None,
) -> List[ImportWarning]:
    """Enrich every row in place; return all warnings in row order."""
    resolver = resolver or get_country_resolver()
    keyer = keyer or RecordKeyer()
    warnings: List[ImportWarning] = []
    for i, row in enumerate(rows):
        warnings.extend(enrich_vessel_row(row, i, resolver, keyer))
    return warnings


def import_grid(
    grid: CellGrid,
    profile: ImportProfile,
    cfg: ExtractorConfig = DEFAULT_CONFIG,
    keyer: Optional[RecordKeyer] = None,
) -> ImportResult:
    """Parse *grid* against *profile* and apply the profile's enrichment."""
    result = parse_grid(grid, profile.column_schema, cfg=cfg, profile_id=profile.profile_id)
    if profile.enrich == "vessel" and result.rows:
        result.warnings.extend(enrich_vessel_rows(result.rows, keyer=keyer))
    return result


# ---------------------------------------------------------------------------
# File import
# ---------------------------------------------------------------------------

def run_import(
    data: bytes,
    profile: Union[str, ImportProfile],
    filename: Optional[str] = None,
    cfg: ExtractorConfig = DEFAULT_CONFIG,
    reader: Optional[ExcelReader] = None,
    keyer: Optional[RecordKeyer] = None,
) -> ImportResult:
    """
    Import one spreadsheet file.

    *profile* is an :class:`ImportProfile` or a profile id / YAML path.

    Raises:
        StructuralMismatch: a required column is missing from the header row
        UnreadableSpreadsheet: *data* is not a readable workbook
        ProfileNotFoundError: *profile* names no known profile
    """
    if not isinstance(profile, ImportProfile):
        profile = load_profile(profile)
    reader = reader or ExcelReader()

    logger.info("run_import: profile=%s file=%s (%d bytes)", profile.profile_id, filename or "<bytes>", len(data))
    grid = reader.read_grid(data, filename)
    result = import_grid(grid, profile, cfg=cfg, keyer=keyer)

    logger.info(
        "run_import: %d row(s), %d validation error(s), %d warning(s)",
        len(result.rows), len(result.validation.errors), len(result.warnings),
    )
    return result

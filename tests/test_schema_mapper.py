import pytest

from sheetimport.errors import StructuralMismatch
from sheetimport.extractors.excel.data_cleaner import DataCleaner
from sheetimport.extractors.excel.schema_mapper import SchemaMapper
from sheetimport.ir import ColumnSchema, ColumnSpec


def _schema(*specs):
    return ColumnSchema(columns=[ColumnSpec(**s) for s in specs])


def test_mandatory_suffix_normalizes_like_plain_label():
    assert DataCleaner.normalize_header("Departure terminal (Mandatory)") == DataCleaner.normalize_header(
        "Departure Terminal"
    )


@pytest.mark.parametrize(
    "text",
    [
        "Departure terminal (Mandatory)",
        "Quantity\n(mt)",
        "ETA (mandatory field)",
        "Mandatory: Vessel Name",
        "  Cargo   Origin 1 ",
        "",
    ],
)
def test_normalize_header_is_idempotent(text):
    once = DataCleaner.normalize_header(text)

    assert DataCleaner.normalize_header(once) == once


def test_bind_exact_and_normalized(vessel_schema):
    headers = ["vessel name", "IMO", "Departure country (Mandatory)", "Departure\nport"]

    bindings = SchemaMapper().bind(headers, vessel_schema)

    assert bindings == {"vessel_name": 0, "imo": 1, "departure_country": 2, "departure_port": 3}


def test_exact_matches_bind_before_substring_matches():
    schema = _schema(
        {"key": "port", "label": "Port"},
        {"key": "departure_port", "label": "Departure Port"},
    )

    bindings = SchemaMapper().bind(["Departure Port", "Destination Port"], schema)

    assert bindings == {"departure_port": 0, "port": 1}


def test_substring_match_is_plain_containment():
    assert SchemaMapper.partial_match("Quantity (mt)", "Quantity") is True
    assert SchemaMapper.partial_match("Vessel Names", "Vessel Name") is True
    assert SchemaMapper.partial_match("Shipper", "Shippers") is True


def test_short_label_only_matches_as_a_whole_word():
    assert SchemaMapper.partial_match("Vessel Details", "ETA") is False
    assert SchemaMapper.partial_match("ETA Date", "ETA") is True
    assert SchemaMapper.partial_match("IMO Number", "IMO") is True


def test_plural_header_binds_required_column():
    schema = _schema(
        {"key": "vessel_name", "label": "Vessel Name", "required": True},
        {"key": "status", "label": "Status"},
    )
    headers = ["Vessel Names", "Statuses"]
    mapper = SchemaMapper()

    bindings = mapper.bind(headers, schema)
    mapper.check_required(bindings, headers, schema)

    assert bindings == {"vessel_name": 0, "status": 1}


def test_empty_header_never_matches():
    assert SchemaMapper.exact_match("", "IMO") is False
    assert SchemaMapper.partial_match("", "IMO") is False


def test_unbound_optional_column_is_absent():
    schema = _schema(
        {"key": "vessel_name", "label": "Vessel Name", "required": True},
        {"key": "shipper", "label": "Shipper"},
    )

    assert SchemaMapper().bind(["Vessel Name"], schema) == {"vessel_name": 0}


def test_check_required_names_exactly_the_missing_labels(vessel_schema):
    headers = ["Vessel name", "IMO", "", "Departure port"]
    mapper = SchemaMapper()
    bindings = mapper.bind(headers, vessel_schema)

    with pytest.raises(StructuralMismatch) as excinfo:
        mapper.check_required(bindings, headers, vessel_schema)

    err = excinfo.value
    assert err.missing == ["Departure Country"]
    assert err.found == ["Vessel name", "IMO", "Departure port"]
    assert str(err) == (
        "Missing required columns: Departure Country. "
        "Found columns: Vessel name, IMO, Departure port. "
        "Expected columns: Vessel Name, IMO, Departure Country, Departure Port"
    )


def test_substring_match_does_not_reuse_a_bound_header():
    schema = _schema(
        {"key": "commodity_group", "label": "Commodity Group"},
        {"key": "commodity_description", "label": "Commodity"},
    )

    assert SchemaMapper().bind(["Vessel", "Commodity"], schema) == {"commodity_description": 1}

from datetime import datetime
from io import BytesIO

from openpyxl import load_workbook

from sheetimport.pipeline import run_import
from sheetimport.profile_loader import load_profile
from sheetimport.template import export_rows, generate_template


def _sheet(data: bytes):
    return load_workbook(BytesIO(data)).active


def test_template_has_labels_and_example_row():
    profile = load_profile("vessels")

    ws = _sheet(generate_template(profile.column_schema, sheet_name=profile.sheet_name))

    assert ws.title == "Vessels"
    labels = [c.value for c in ws[1]]
    assert labels == profile.column_schema.labels
    examples = {col.key: ws.cell(row=2, column=i).value for i, col in enumerate(profile.column_schema.columns, start=1)}
    assert examples["vessel_name"] == "MV Black Sea"
    assert examples["imo"] == "9456147"
    assert isinstance(examples["eta"], datetime)
    assert examples["quantity"] == 25000
    assert ws.max_row == 2


def test_template_imports_back_cleanly():
    data = generate_template(load_profile("vessels").column_schema)

    result = run_import(data, "vessels", filename="template.xlsx")

    assert result.validation.is_valid is True
    assert len(result.rows) == 1
    row = result.rows[0]
    assert row["eta"] == "2025-09-08"
    assert row["quantity"] == "25000"
    assert row["departure_location"] == "RO-Constanta"
    assert row["destination_country_code"] == "EG"
    assert row["commodity_group"] == "WHEAT"
    assert row["record_key"] == "9456147|2025-09-10|Wheat"
    assert result.warnings == []


def test_template_saved_to_path(tmp_path):
    out = tmp_path / "nested" / "daily_prices.xlsx"

    data = generate_template(load_profile("daily_prices").column_schema, path=out)

    assert out.read_bytes() == data


def test_export_rows_in_schema_order():
    schema = load_profile("daily_prices").column_schema
    rows = [
        {"date": "2025-09-17", "wheat_bread": "189", "barley": None, "unknown": "dropped"},
        {"date": "17.09.2025", "corn": "189.5"},
    ]

    ws = _sheet(export_rows(rows, schema))

    assert [c.value for c in ws[1]] == schema.labels
    assert ws.max_row == 3
    assert isinstance(ws["A2"].value, datetime)
    assert ws["B2"].value == 189
    assert ws["D2"].value in (None, "")
    assert ws["A3"].value == "17.09.2025"
    assert ws["E3"].value == 189.5
    assert "dropped" not in [c.value for c in ws[2]]

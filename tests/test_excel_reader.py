from datetime import datetime

import pytest
from openpyxl import Workbook

from sheetimport.errors import UnreadableSpreadsheet
from sheetimport.extractors.excel.reader import ExcelReader
from sheetimport.pipeline import run_import
from sheetimport.profile_loader import parse_profile


def _write_vendor_xlsx(path) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Line-up"
    ws.append(["VESSEL DETAILS", None, "VESSEL DEPARTURE PLACE", None, None])
    ws.append(["1209"])
    ws.append(["Vessel name", "IMO", "Departure country", "Departure port", "Operation\ncommenced"])
    ws.append(["Tanzanite", 9456147, "Romania", "Constantza", datetime(2025, 9, 10)])
    ws.append(["Aster", None, "Bulgaria", "Varna", datetime(2025, 9, 11)])
    second = wb.create_sheet("Ignored")
    second.append(["not", "read"])
    wb.save(path)
    return path.read_bytes()


def _profile():
    return parse_profile({
        "profile_id": "vendor",
        "enrich": "vessel",
        "columns": [
            {"key": "vessel_name", "label": "Vessel Name", "required": True},
            {"key": "imo", "label": "IMO"},
            {"key": "departure_country", "label": "Departure Country", "required": True},
            {"key": "departure_port", "label": "Departure Port", "required": True},
            {"key": "operation_commenced", "label": "Operation Commenced", "kind": "date"},
        ],
    })


def test_read_grid_first_sheet_only(tmp_path):
    data = _write_vendor_xlsx(tmp_path / "vendor.xlsx")

    grid = ExcelReader().read_grid(data, "vendor.xlsx")

    assert len(grid) == 5
    assert grid[1] == ["1209"]
    assert grid[3][0] == "Tanzanite"
    assert grid[3][1] == 9456147
    assert isinstance(grid[3][4], datetime)
    assert grid[4][1] is None


def test_read_headers_returns_first_row(tmp_path):
    data = _write_vendor_xlsx(tmp_path / "vendor.xlsx")

    assert ExcelReader().read_headers(data) == ["VESSEL DETAILS", "", "VESSEL DEPARTURE PLACE"]


def test_run_import_from_xlsx_bytes(tmp_path):
    data = _write_vendor_xlsx(tmp_path / "vendor.xlsx")

    result = run_import(data, _profile(), filename="vendor.xlsx")

    assert result.header_row_index == 2
    assert result.validation.is_valid is True
    assert [r["departure_location"] for r in result.rows] == ["RO-Constanta", "BG-Varna"]
    assert result.rows[0]["imo"] == "9456147"
    assert result.rows[0]["operation_commenced"] == "2025-09-10"
    # No commodity column, so rows fall back to random keys.
    assert len(result.warnings_of("degraded_record_key")) == 2


def test_unreadable_bytes():
    reader = ExcelReader()

    with pytest.raises(UnreadableSpreadsheet):
        reader.read_grid(b"")
    with pytest.raises(UnreadableSpreadsheet):
        reader.read_grid(b"this is not a workbook", "broken.xlsx")


def test_pick_engine():
    ole = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 8

    assert ExcelReader.pick_engine(ole) == "xlrd"
    assert ExcelReader.pick_engine(b"PK\x03\x04", "legacy.XLS") == "xlrd"
    assert ExcelReader.pick_engine(b"PK\x03\x04", "book.xlsx") == "openpyxl"

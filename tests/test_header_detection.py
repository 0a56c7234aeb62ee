from sheetimport.extractors.excel.config import ExtractorConfig
from sheetimport.extractors.excel.header_detector import HeaderDetector


def test_vendor_layout_skips_group_rows_and_report_number(vessel_grid):
    loc = HeaderDetector().locate(vessel_grid)

    assert loc.header_row_index == 3
    assert loc.data_start_index == 4
    assert loc.group_header_rows == [0, 1]


def test_plain_template_header_is_row_zero():
    """Dense header rows stay headers even when they contain 'Destination'."""
    grid = [
        ["Vessel Name", "Destination Country", "Departure Port"],
        ["Aster", "Egypt", "Constanta"],
    ]
    loc = HeaderDetector().locate(grid)

    assert loc.header_row_index == 0
    assert loc.data_start_index == 1
    assert loc.group_header_rows == []


def test_single_group_row():
    grid = [
        ["VESSEL DETAILS", None, None, None],
        ["Vessel name", "IMO", "Status", "ETA"],
        ["Aster", "9456147", "Loading", "2025-09-08"],
    ]
    loc = HeaderDetector().locate(grid)

    assert loc.header_row_index == 1
    assert loc.data_start_index == 2
    assert loc.group_header_rows == [0]


def test_two_group_rows():
    grid = [
        ["VESSEL DETAILS", None, None, None],
        [None, "Departure", None, "Destination"],
        ["Vessel name", "Departure port", "IMO", "Destination port"],
        ["Aster", "Constanta", "9456147", "Alexandria"],
    ]
    loc = HeaderDetector().locate(grid)

    assert loc.header_row_index == 2
    assert loc.data_start_index == 3


def test_group_header_scan_is_limited_to_configured_rows():
    grid = [
        ["VESSEL DETAILS", None, None, None],
        [None, "Departure", None, "Destination"],
        ["Vessel name", "Departure port", "IMO", "Destination port"],
        ["Aster", "Constanta", "9456147", "Alexandria"],
    ]

    one_row = HeaderDetector(ExtractorConfig(group_header_scan_rows=1))
    assert one_row.select_header_row_index(grid) == (1, [0])

    no_rows = HeaderDetector(ExtractorConfig(group_header_scan_rows=0))
    assert no_rows.select_header_row_index(grid) == (0, [])


def test_wider_scan_takes_a_third_group_row():
    grid = [
        ["MARKET REPORT", None, None, None],
        ["VESSEL DETAILS", None, None, None],
        [None, "Departure", None, "Destination"],
        ["Vessel name", "Departure port", "IMO", "Destination port"],
        ["Aster", "Constanta", "9456147", "Alexandria"],
    ]

    assert HeaderDetector().select_header_row_index(grid) == (2, [0, 1])
    loc = HeaderDetector(ExtractorConfig(group_header_scan_rows=3)).locate(grid)
    assert loc.header_row_index == 3
    assert loc.group_header_rows == [0, 1, 2]


def test_metadata_between_header_and_data_is_skipped():
    grid = [
        ["Vessel name", "IMO", "Status"],
        ["1209"],
        [None, None],
        ["Aster", "9456147", "Loading"],
    ]
    loc = HeaderDetector().locate(grid)

    assert loc.header_row_index == 0
    assert loc.data_start_index == 3


def test_short_data_row_is_still_data():
    grid = [["Vessel name", "IMO", "Status"], ["Aster", "9456147"]]

    assert HeaderDetector().locate(grid).data_start_index == 1


def test_no_data_rows():
    detector = HeaderDetector()

    assert detector.locate([]).has_data is False
    assert detector.locate([["Vessel name", "IMO"]]).has_data is False
    assert detector.locate([["Vessel name", "IMO", "Status"], ["1209"]]).has_data is False


def test_is_metadata_row():
    detector = HeaderDetector()

    assert detector.is_metadata_row([]) is True
    assert detector.is_metadata_row([None, ""]) is True
    assert detector.is_metadata_row(["1209"]) is True
    assert detector.is_metadata_row(["1209", "report"]) is True
    assert detector.is_metadata_row(["1209", "a", "b"]) is False
    assert detector.is_metadata_row(["Aster"]) is False


def test_header_texts_flatten_line_breaks():
    grid = [["Departure\nterminal (Mandatory)", "  IMO ", None]]

    assert HeaderDetector.header_texts(grid, 0) == ["Departure terminal (Mandatory)", "IMO", ""]

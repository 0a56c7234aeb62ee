"""
Pytest configuration and shared fixtures.
"""
import os
import sys

import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sheetimport.config import reset_settings
from sheetimport.ir import ColumnSchema, ColumnSpec
from sheetimport.mapping.record_key import RecordKeyer


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Re-read settings for every test so monkeypatched env vars apply."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def vessel_grid():
    """Vendor layout: group header, blank spacer, report number, header, data."""
    return [
        ["VESSEL DETAILS", "", "VESSEL DEPARTURE PLACE", ""],
        ["", None, "", ""],
        ["1209"],
        ["Vessel name", "IMO", "Departure country", "Departure port"],
        ["Tanzanite", "9456147", "Romania", "Constantza"],
    ]


@pytest.fixture
def vessel_schema():
    return ColumnSchema(columns=[
        ColumnSpec(key="vessel_name", label="Vessel Name", required=True),
        ColumnSpec(key="imo", label="IMO"),
        ColumnSpec(key="departure_country", label="Departure Country", required=True),
        ColumnSpec(key="departure_port", label="Departure Port", required=True),
    ])


@pytest.fixture
def fixed_keyer():
    """RecordKeyer with a frozen clock and suffix."""
    return RecordKeyer(separator="|", clock=lambda: 1700000000000, suffix_factory=lambda: "abc123")

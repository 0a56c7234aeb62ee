"""
sheetimport: spreadsheet import and normalisation for commodity market data.

Typical use::

    from sheetimport.pipeline import run_import

    result = run_import(open("vessels.xlsx", "rb").read(), "vessels")
"""

__version__ = "0.1.0"

"""
Spreadsheet extraction subpackage.

Public API:
  - ExcelReader       (bytes -> cell grid, first sheet only)
  - HeaderDetector    (group headers, metadata rows, header row)
  - SchemaMapper      (header -> column binding, required-column gate)
  - DataCleaner       (cell coercion, header normalisation)
  - ExtractorConfig   (tunable thresholds)
"""

from sheetimport.extractors.excel.config import ExtractorConfig, DEFAULT_CONFIG
from sheetimport.extractors.excel.data_cleaner import DataCleaner
from sheetimport.extractors.excel.header_detector import HeaderDetector
from sheetimport.extractors.excel.reader import ExcelReader
from sheetimport.extractors.excel.schema_mapper import SchemaMapper

__all__ = [
    "ExtractorConfig",
    "DEFAULT_CONFIG",
    "DataCleaner",
    "HeaderDetector",
    "ExcelReader",
    "SchemaMapper",
]

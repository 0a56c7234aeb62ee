"""Template generation and row export."""

from sheetimport.template.writer import export_rows, generate_template

__all__ = ["generate_template", "export_rows"]

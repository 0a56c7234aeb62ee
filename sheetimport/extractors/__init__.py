"""Extractors turning raw files into cell grids and parsed rows."""

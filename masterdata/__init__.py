"""masterdata: spreadsheet schema compiler and indexed master data runtime."""

__version__ = "0.1.0"

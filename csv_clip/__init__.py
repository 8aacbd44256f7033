"""Convert CSV files into spreadsheet-safe tab-separated text for pasting."""

__version__ = "0.3.0"

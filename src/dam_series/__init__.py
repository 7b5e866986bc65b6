"""dam-series: half-hour DAM price/volume series from spreadsheet and JSON exports."""

__version__ = "0.1.0"

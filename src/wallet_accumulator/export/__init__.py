"""Report exporters."""

from wallet_accumulator.export.csv import CsvExporter, render_detail_rows, render_total_rows

__all__ = [
    "CsvExporter",
    "render_detail_rows",
    "render_total_rows",
]

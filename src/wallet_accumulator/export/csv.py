"""CSV export of aggregated reports in "total" and "detail" layouts."""

import csv
import io
from decimal import Decimal
from pathlib import Path

from wallet_accumulator.core.models import Report, SourceKind, exact_arithmetic

TOTAL_HEADER = ["トークン", "", "保有量", "", "計測数量", "", "", "JPYへのレート"]
DETAIL_HEADER = ["トークン", "保管場所タイプ", "名称/アドレス", "ネットワーク", "保有量", "価格(JPY)", "評価額(JPY)"]
HOLDING_LABEL = "保有量"


def _fmt(value: Decimal) -> str:
    # Plain notation: Excel misreads "1E-8" style exponents
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def render_total_rows(report: Report) -> list[list[str]]:
    """One row per symbol: symbol, label, total amount, and price."""
    return [
        [entry.symbol, "", HOLDING_LABEL, "", _fmt(entry.total_amount), "", "", _fmt(entry.price)]
        for entry in report.entries
    ]


def render_detail_rows(report: Report) -> list[list[str]]:
    """
    One row per contributing record, sorted by symbol, label, then chain.

    A symbol without details still gets one zero row so that a verified zero
    balance stays visible.

    """
    rows = []
    for entry in report.entries:
        if not entry.details:
            rows.append([entry.symbol, SourceKind.WALLET.value, "", "", "0", _fmt(entry.price), "0"])
            continue
        for record in entry.details:
            with exact_arithmetic():
                value = record.amount * entry.price
            rows.append(
                [
                    record.symbol,
                    record.source_kind.value,
                    record.source_label,
                    record.chain or "",
                    _fmt(record.amount),
                    _fmt(entry.price),
                    _fmt(value),
                ]
            )

    rows.sort(key=lambda row: (row[0], row[2], row[3]))
    return rows


class CsvExporter:
    """
    Writes reports as CSV for spreadsheet import.

    Parameters
    ----------
    encoding : str
        Output encoding; characters it cannot represent are replaced

    """

    def __init__(self, encoding: str = "shift_jis") -> None:
        self.encoding = encoding

    def _write(self, path: str | Path, header: list[str], rows: list[list[str]]) -> None:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\r\n")
        writer.writerow(header)
        writer.writerows(rows)
        Path(path).write_bytes(buffer.getvalue().encode(self.encoding, errors="replace"))

    def export_total(self, report: Report, path: str | Path) -> None:
        """Write the one-row-per-symbol layout."""
        self._write(path, TOTAL_HEADER, render_total_rows(report))

    def export_detail(self, report: Report, path: str | Path) -> None:
        """Write the one-row-per-record layout."""
        self._write(path, DETAIL_HEADER, render_detail_rows(report))

    def export(self, report: Report, path: str | Path, mode: str = "total") -> None:
        """
        Write the report in the given mode.

        Raises
        ------
        ValueError
            If mode is neither 'total' nor 'detail'

        """
        if mode == "detail":
            self.export_detail(report, path)
        elif mode == "total":
            self.export_total(report, path)
        else:
            msg = f"Unknown export mode: {mode}"
            raise ValueError(msg)

"""Offline exchange statement import (BITPOINT spot transaction CSV).

The export lists movements row by row and its last row holds the current
balance of every currency column. The file is usually Shift_JIS, but the
delimiter, the ``No`` anchor, symbol headers and numbers are all ASCII, so the
file is read as UTF-8 with replacement and the Japanese headers are ignored.
Every configured symbol found as a column is emitted, zero included, so a
checked-and-empty balance is distinguishable from an unchecked one.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path

from wallet_accumulator.core.models import BalanceRecord, SourceKind, TokenDefinition
from wallet_accumulator.core.registry import ProviderRegistry
from wallet_accumulator.errors import StatementFormatError
from wallet_accumulator.providers.base import BaseBalanceProvider

logger = logging.getLogger(__name__)

HEADER_ANCHOR = "No,"
SYMBOL_COLUMN_PATTERN = re.compile(r"[A-Z0-9][A-Z0-9()]*")
STATEMENT_CHAIN = "cex"


def coerce_amount(raw: str) -> Decimal:
    """
    Parse a statement cell, falling back to 0 for anything unusable.

    Empty, non-numeric, NaN, infinite and negative cells all become 0. This is
    intentional: a damaged cell must not abort the import of the other columns.

    Parameters
    ----------
    raw : str
        Raw cell text

    Returns
    -------
    Decimal
        Parsed amount, or 0

    """
    text = raw.strip()
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


def find_symbol_columns(header: list[str]) -> dict[str, int]:
    """Map bare alphanumeric header names (currency symbols) to column indexes."""
    columns = {}
    for index, name in enumerate(header):
        column = name.strip()
        if column == "No" or not SYMBOL_COLUMN_PATTERN.fullmatch(column):
            continue
        columns.setdefault(column, index)
    return columns


@ProviderRegistry.register
class StatementProvider(BaseBalanceProvider):
    """
    Reads current balances from the last row of an offline statement export.

    Parameters
    ----------
    path : str | Path
        Statement CSV path
    source_label : str
        Label stamped on every record
    debug : bool
        Enable debug output

    """

    name = "statement"
    description = "Offline statement CSV (BITPOINT spot export, last row = balances)"
    source_kind = SourceKind.EXCHANGE

    def __init__(self, path: str | Path, source_label: str = "BITPOINT", *, debug: bool = False) -> None:
        super().__init__(debug=debug)
        self.path = Path(path)
        self.source_label = source_label

    def read_lines(self) -> list[str]:
        """
        Read non-empty, stripped lines of the statement.

        Raises
        ------
        StatementFormatError
            If the file is missing or empty

        """
        if not self.path.is_file():
            msg = f"Statement CSV not found: {self.path}"
            raise StatementFormatError(msg)

        raw = self.path.read_bytes().decode("utf-8", errors="replace")
        lines = [line.strip() for line in raw.splitlines()]
        lines = [line for line in lines if line]
        if not lines:
            msg = f"Statement CSV is empty: {self.path}"
            raise StatementFormatError(msg)
        return lines

    def parse(self) -> tuple[int, list[str], list[str]]:
        """
        Locate the header row and the balances row.

        Returns
        -------
        tuple[int, list[str], list[str]]
            Header line index, header cells, and last-row cells

        Raises
        ------
        StatementFormatError
            If the file is missing, empty, or has no ``No,`` header row

        """
        lines = self.read_lines()

        header_index = next((i for i, line in enumerate(lines) if line.startswith(HEADER_ANCHOR)), None)
        if header_index is None:
            msg = f"Statement CSV header row ({HEADER_ANCHOR}) not found: {self.path}"
            raise StatementFormatError(msg)

        return header_index, lines[header_index].split(","), lines[-1].split(",")

    def validate(self) -> None:
        """Check the statement can be parsed, so a bad file fails before any fetch."""
        self.parse()

    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Emit one record per configured symbol present as a statement column.

        Raises
        ------
        StatementFormatError
            If the file is missing, empty, or has no ``No,`` header row

        """
        header_index, header, data = self.parse()
        columns = find_symbol_columns(header)

        if self.debug:
            logger.debug(
                "Statement %s: header at line %d, record No=%s, %d symbol columns",
                self.path,
                header_index + 1,
                data[0] if data else "",
                len(columns),
            )

        records = []
        for symbol in dict.fromkeys(token.symbol for token in tokens):
            index = columns.get(symbol)
            if index is None:
                continue
            cell = data[index] if index < len(data) else ""
            records.append(self._record(symbol, coerce_amount(cell), self.source_label, STATEMENT_CHAIN))

        if self.debug:
            logger.debug("Statement %s: %d records (zeros included)", self.path, len(records))
        return records

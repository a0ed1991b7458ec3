"""Balance aggregator: merges provider records into a ranked, valued report."""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any

from wallet_accumulator.core.models import (
    DEFAULT_VALUATION_CURRENCY,
    AggregatedEntry,
    BalanceRecord,
    PriceTable,
    Report,
    TokenDefinition,
    exact_arithmetic,
)
from wallet_accumulator.core.registry import BalanceProviderInterface

logger = logging.getLogger(__name__)


class BalanceAggregator:
    """
    Orchestrates balance fetching across providers and builds the report.

    Workflow:
    1. Invoke every provider with the full token set (concurrently), keeping
       results in declared provider order
    2. Resolve prices once for the token set
    3. Group records by symbol and sum amounts exactly
    4. Keep configured symbols (even at zero) and any symbol with a positive
       total; always drop the valuation currency
    5. Attach price and value, then rank by value (stable, descending)

    Parameters
    ----------
    tokens : list[TokenDefinition]
        Configured token definitions
    providers : list[BalanceProviderInterface]
        Balance providers, invoked in this order
    price_resolver : Any
        Object with ``resolve(tokens) -> PriceTable``
    valuation_currency : str
        Symbol excluded from the report (it is the unit, not a holding)
    max_workers : int
        Maximum providers fetched at the same time
    debug : bool
        Enable debug output

    """

    def __init__(
        self,
        tokens: list[TokenDefinition],
        providers: list[BalanceProviderInterface],
        price_resolver: Any,
        valuation_currency: str = DEFAULT_VALUATION_CURRENCY,
        max_workers: int = 4,
        *,
        debug: bool = False,
    ) -> None:
        self.tokens = list(tokens)
        self.providers = list(providers)
        self.price_resolver = price_resolver
        self.valuation_currency = valuation_currency
        self.max_workers = max_workers
        self.debug = debug

    def aggregate(self) -> Report:
        """
        Run the full pipeline and return the ranked report.

        Returns
        -------
        Report
            Entries sorted by value, highest first

        """
        records = self.fetch_all()
        if self.debug:
            logger.debug("Fetched %d balance records", len(records))

        prices = self.price_resolver.resolve(self.tokens)
        return self.build_report(records, prices)

    def fetch_all(self) -> list[BalanceRecord]:
        """
        Invoke all providers and concatenate their records in declared order.

        Providers run in a thread pool; a provider exception propagates because
        providers are required to absorb their own per-item failures.

        Returns
        -------
        list[BalanceRecord]
            All records, grouped by provider in declared order

        """
        if not self.providers:
            return []

        workers = max(1, min(len(self.providers), self.max_workers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(provider.fetch, self.tokens) for provider in self.providers]
            results = [future.result() for future in futures]

        records: list[BalanceRecord] = []
        for provider, provider_records in zip(self.providers, results, strict=True):
            if self.debug:
                logger.debug("%s: %d records", getattr(provider, "name", type(provider).__name__), len(provider_records))
            records.extend(provider_records)
        return records

    def build_report(self, records: list[BalanceRecord], prices: PriceTable) -> Report:
        """
        Group, filter, value, and rank records.

        Parameters
        ----------
        records : list[BalanceRecord]
            All fetched records in emission order
        prices : PriceTable
            Symbol to price mapping

        Returns
        -------
        Report
            Ranked report

        """
        grouped: dict[str, list[BalanceRecord]] = {}
        for record in records:
            grouped.setdefault(record.symbol, []).append(record)

        configured = [token.symbol for token in self.tokens]
        configured_set = set(configured)
        # Symbol universe in discovery order: configured symbols first, then observed ones
        universe = list(dict.fromkeys([*configured, *grouped]))

        entries = []
        for symbol in universe:
            if symbol == self.valuation_currency:
                continue

            details = grouped.get(symbol, [])
            price = prices.get(symbol, Decimal("0"))
            with exact_arithmetic():
                total = sum((record.amount for record in details), Decimal("0"))
                value = total * price
            if total <= 0 and symbol not in configured_set:
                continue

            if self.debug:
                if details:
                    logger.debug("%s: total=%s / %d details", symbol, total, len(details))
                else:
                    logger.debug("%s: zero balance (no details)", symbol)

            entries.append(
                AggregatedEntry(
                    symbol=symbol,
                    total_amount=total,
                    details=details,
                    price=price,
                    value=value,
                )
            )

        # sorted() is stable, so equal values keep discovery order
        entries = sorted(entries, key=lambda entry: entry.value, reverse=True)
        return Report(entries=entries, valuation_currency=self.valuation_currency)

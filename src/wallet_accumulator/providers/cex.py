"""Centralized exchange account balances through ccxt."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import ccxt

from wallet_accumulator.core.models import DEFAULT_VALUATION_CURRENCY, BalanceRecord, SourceKind, TokenDefinition
from wallet_accumulator.core.registry import ProviderRegistry
from wallet_accumulator.data.settings import ExchangeCredentials
from wallet_accumulator.providers.base import BaseBalanceProvider
from wallet_accumulator.rpc.retry import RetryConfig, call_with_retry

logger = logging.getLogger(__name__)

CEX_CHAIN = "cex"


@ProviderRegistry.register
class CexProvider(BaseBalanceProvider):
    """
    Fetches total balances from exchange accounts, one ``fetch_balance`` call each.

    Exchanges are enabled from an explicit credential list. An exchange without
    credentials is simply never queried.

    Parameters
    ----------
    credentials : list[ExchangeCredentials] | None
        Exchange id plus API key/secret for each enabled account
    valuation_currency : str
        Kept in the target symbol set so cash balances show up in the details
    exchanges : list[Any] | None
        Pre-built ccxt exchange objects (overrides ``credentials``)
    retry_config : RetryConfig | None
        Retry configuration for rate-limited calls
    debug : bool
        Enable debug output

    """

    name = "cex"
    description = "Centralized exchange accounts via ccxt (API key + secret)"
    source_kind = SourceKind.EXCHANGE

    def __init__(
        self,
        credentials: list[ExchangeCredentials] | None = None,
        valuation_currency: str = DEFAULT_VALUATION_CURRENCY,
        exchanges: list[Any] | None = None,
        retry_config: RetryConfig | None = None,
        *,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        self.valuation_currency = valuation_currency
        self.retry_config = retry_config or RetryConfig()
        self.exchanges = exchanges if exchanges is not None else self._build_exchanges(credentials or [])

    @staticmethod
    def _build_exchanges(credentials: list[ExchangeCredentials]) -> list[Any]:
        exchanges = []
        for cred in credentials:
            exchange_class = getattr(ccxt, cred.exchange_id, None)
            if exchange_class is None:
                logger.warning("Exchange %s is not supported by ccxt, skipping", cred.exchange_id)
                continue
            try:
                exchange = exchange_class(
                    {
                        "apiKey": cred.api_key,
                        "secret": cred.secret,
                        "enableRateLimit": True,
                    }
                )
            except Exception as e:
                logger.error("Failed to initialize %s: %s", cred.exchange_id, e)
                continue
            exchanges.append(exchange)
            logger.info("Enabled CEX: %s", cred.exchange_id)
        return exchanges

    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Fetch balances for all enabled exchanges.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        list[BalanceRecord]
            One record per exchange and configured symbol with a positive total

        """
        if not self.exchanges:
            return []

        logger.info("Fetching CEX balances from %d exchanges...", len(self.exchanges))

        target_symbols = {token.symbol for token in tokens}
        target_symbols.add(self.valuation_currency)

        records: list[BalanceRecord] = []
        for exchange in self.exchanges:
            label = getattr(exchange, "name", None) or exchange.id
            try:
                balance = call_with_retry(exchange.fetch_balance, self.retry_config, label=f"{exchange.id} fetch_balance")
            except Exception as e:
                logger.warning("Failed to fetch CEX balance for %s: %s", exchange.id, e)
                continue

            totals = balance.get("total") or {}
            for code, raw_amount in totals.items():
                if code not in target_symbols:
                    continue
                amount = _to_decimal(raw_amount)
                if amount is None or amount <= 0:
                    continue
                records.append(self._record(code, amount, label, CEX_CHAIN))

            if self.debug:
                logger.debug("%s: %d matching balances", label, len(totals))

        return records


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None

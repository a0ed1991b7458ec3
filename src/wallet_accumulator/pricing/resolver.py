"""Resolve valuation prices for configured tokens with graceful degradation."""

import logging
from decimal import Decimal
from typing import Protocol

from wallet_accumulator.core.models import DEFAULT_VALUATION_CURRENCY, PriceTable, TokenDefinition

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    """Batched price lookup by external identifier."""

    def get_prices(self, ids: list[str], vs_currency: str) -> dict[str, Decimal]: ...


class PriceResolver:
    """
    Builds a PriceTable for the configured token set.

    The valuation currency is always priced at 1. Tokens without a valuation id
    are not requested. Any requested symbol the service cannot price gets 0,
    and a total service failure leaves every requested symbol at 0 instead of
    aborting the run.

    Parameters
    ----------
    source : PriceSource
        Price service client (e.g. CoinGeckoClient)
    valuation_currency : str
        Currency all prices are expressed in
    debug : bool
        Enable debug output

    """

    def __init__(
        self,
        source: PriceSource,
        valuation_currency: str = DEFAULT_VALUATION_CURRENCY,
        *,
        debug: bool = False,
    ) -> None:
        self.source = source
        self.valuation_currency = valuation_currency
        self.debug = debug

    def resolve(self, tokens: list[TokenDefinition]) -> PriceTable:
        """
        Resolve prices for all tokens carrying a valuation id.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        PriceTable
            Mapping of symbol to price; the valuation currency maps to 1

        """
        prices: PriceTable = {self.valuation_currency: Decimal("1")}

        targets = [token for token in tokens if token.valuation_id and token.symbol != self.valuation_currency]
        if not targets:
            return prices

        logger.info("Fetching prices for %d tokens...", len(targets))

        ids = list(dict.fromkeys(token.valuation_id for token in targets))
        try:
            fetched = self.source.get_prices(ids, self.valuation_currency)
        except Exception as e:
            logger.warning("Price lookup failed, valuing %d tokens at 0: %s", len(targets), e)
            fetched = {}

        for token in targets:
            price = fetched.get(token.valuation_id)
            if price is None:
                if self.debug:
                    logger.debug("No price for %s (%s), using 0", token.symbol, token.valuation_id)
                price = Decimal("0")
            prices[token.symbol] = price

        return prices

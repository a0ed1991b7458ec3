"""Pricing services for valuation-currency enrichment."""

from wallet_accumulator.pricing.coingecko import CoinGeckoClient
from wallet_accumulator.pricing.resolver import PriceResolver, PriceSource

__all__ = [
    "CoinGeckoClient",
    "PriceResolver",
    "PriceSource",
]

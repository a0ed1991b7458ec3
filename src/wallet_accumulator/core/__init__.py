"""Core functionality including models, aggregator, and provider registry."""

from wallet_accumulator.core.aggregator import BalanceAggregator
from wallet_accumulator.core.models import (
    DEFAULT_VALUATION_CURRENCY,
    AggregatedEntry,
    BalanceRecord,
    PriceTable,
    Report,
    SourceKind,
    TokenDefinition,
)
from wallet_accumulator.core.registry import ProviderRegistry

__all__ = [
    "DEFAULT_VALUATION_CURRENCY",
    "AggregatedEntry",
    "BalanceAggregator",
    "BalanceRecord",
    "PriceTable",
    "ProviderRegistry",
    "Report",
    "SourceKind",
    "TokenDefinition",
]

"""Balance providers for wallets, exchanges, and offline statements."""

# Import all providers to trigger auto-registration
from wallet_accumulator.providers.base import BaseBalanceProvider
from wallet_accumulator.providers.bitcoin import BitcoinProvider
from wallet_accumulator.providers.cex import CexProvider
from wallet_accumulator.providers.evm import EvmProvider
from wallet_accumulator.providers.solana import SolanaProvider
from wallet_accumulator.providers.statement import StatementProvider

__all__ = [
    "BaseBalanceProvider",
    "BitcoinProvider",
    "CexProvider",
    "EvmProvider",
    "SolanaProvider",
    "StatementProvider",
]
